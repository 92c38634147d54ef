"""Output of a judge allocation run."""

# Debate Draw
# Copyright (C) 2025  Debate Draw developers
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program.  If not, see <http://www.gnu.org/licenses/>.

from dataclasses import dataclass, field
from typing import Dict, List

from debatedraw.models.round import JudgeAssignment


@dataclass
class AllocationResult:
    """Panels computed for a round, keyed by pairing id.

    Attributes
    ----------
    round_number : int
        Round the panels belong to.
    strategy : str
        Allocation strategy that produced the panels.
    panels : dict of str to list of JudgeAssignment
        Panel of each debate, chair first.
    double_booked : list of str
        Judges reused because there were fewer judges than debates.
    unallocated : list of str
        Judges that could not be seated on any debate.
    """

    round_number: int
    strategy: str
    panels: Dict[str, List[JudgeAssignment]] = field(default_factory=dict)
    double_booked: List[str] = field(default_factory=list)
    unallocated: List[str] = field(default_factory=list)

    @property
    def panel_sizes(self) -> Dict[str, int]:
        return {pairing_id: len(panel) for pairing_id, panel in self.panels.items()}

    def panel_of(self, pairing_id: str) -> List[JudgeAssignment]:
        return self.panels.get(pairing_id, [])

    def chair_of(self, pairing_id: str) -> str:
        """Judge id of the chair of a pairing's panel."""
        for assignment in self.panel_of(pairing_id):
            if assignment.is_chair:
                return assignment.judge_id
        raise KeyError(pairing_id)
