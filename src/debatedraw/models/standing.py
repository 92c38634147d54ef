"""Standings row data class."""

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

from dataclasses import dataclass
from typing import Any, Dict


@dataclass
class StandingRow:
    """Derived standings view of one team.

    Attributes
    ----------
    wins, losses : int
        Finalized debates won and lost; they add up to ``debates``.
    prop_count, opp_count : int
        Finalized debates argued on each side.
    opponent_strength : float
        Buchholz score: mean wins of the opponents faced.
    rank : int
        Shared competition rank; tied rows carry the same rank.
    is_tied : bool
        True when another row has identical wins and opponent strength.
    """

    team_id: str
    team_name: str
    wins: int = 0
    losses: int = 0
    prop_count: int = 0
    opp_count: int = 0
    opponent_strength: float = 0.0
    rank: int = 0
    is_tied: bool = False

    @property
    def debates(self) -> int:
        return self.wins + self.losses

    def to_dict(self) -> Dict[str, Any]:
        return {
            "team_id": self.team_id,
            "team_name": self.team_name,
            "wins": self.wins,
            "losses": self.losses,
            "prop_count": self.prop_count,
            "opp_count": self.opp_count,
            "opponent_strength": self.opponent_strength,
            "rank": self.rank,
            "is_tied": self.is_tied,
        }
