"""Output of a single draw generation."""

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
from typing import List, Optional, Tuple

from debatedraw.constants import FLAG_MESSAGES
from debatedraw.models.enums import FlagKind
from debatedraw.type_hints import PairingTuple, RoundSchedule


@dataclass
class ConstraintFlag:
    """A soft-constraint violation accepted in the draw."""

    kind: FlagKind
    team_ids: Tuple[str, ...]

    @property
    def message(self) -> str:
        return f"{FLAG_MESSAGES[self.kind.value]}: {' vs '.join(self.team_ids)}"


@dataclass
class DrawnPairing:
    """A pairing as produced by the draw, before it is persisted."""

    prop_team_id: str
    opp_team_id: Optional[str]
    bracket: int = 0
    flags: List[ConstraintFlag] = field(default_factory=list)

    @property
    def is_bye(self) -> bool:
        return self.opp_team_id is None

    def as_tuple(self) -> PairingTuple:
        return (self.prop_team_id, self.opp_team_id)


@dataclass(slots=True)
class DrawResult:
    """Pairings of a round in draw order plus the warnings to render."""

    round_number: int
    drawn: List[DrawnPairing]
    pull_ups: List[str] = field(default_factory=list)

    @property
    def pairings(self) -> RoundSchedule:
        """Ordered (prop team id, opp team id) tuples; the bye has opp None."""
        return [p.as_tuple() for p in self.drawn]

    @property
    def flags(self) -> List[List[ConstraintFlag]]:
        """Flags parallel to ``pairings``."""
        return [list(p.flags) for p in self.drawn]

    @property
    def bye_team_id(self) -> Optional[str]:
        for pairing in self.drawn:
            if pairing.is_bye:
                return pairing.prop_team_id
        return None

    @property
    def has_flags(self) -> bool:
        return any(p.flags for p in self.drawn)

    def flags_of_kind(self, kind: FlagKind) -> List[ConstraintFlag]:
        return [f for p in self.drawn for f in p.flags if f.kind is kind]


#  LocalWords:  DrawResult
