"""Data models for a tournament round and its pairings."""

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
from datetime import datetime
from typing import Any, Dict, List, Optional

from dateutil.parser import isoparse

from debatedraw.models.enums import DrawStatus, FlagKind, Side
from debatedraw.models.result import Ballot, Result
from debatedraw.utils import generate_id


@dataclass
class JudgeAssignment:
    """A judge sitting on a pairing."""

    judge_id: str
    is_chair: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {"judge_id": self.judge_id, "is_chair": self.is_chair}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "JudgeAssignment":
        return cls(judge_id=data["judge_id"], is_chair=data.get("is_chair", False))


@dataclass
class Pairing:
    """One scheduled debate within a round.

    A bye is a pairing with only a proposition team.

    Attributes
    ----------
    round_number : int
        Round the pairing belongs to.
    prop_team_id : str or None
        Proposition team.
    opp_team_id : str or None
        Opposition team, None for a bye.
    bracket : int
        Win count of the bracket the pairing was drawn from.
    judges : list of JudgeAssignment
        Assigned panel, at most one of them chair.
    flags : list of FlagKind
        Soft-constraint violations accepted when the pairing was drawn.
    ballots : list of Ballot
        Ballots submitted by the panel.
    result : Result or None
        Aggregated result, once ballots are in.
    """

    round_number: int
    prop_team_id: Optional[str] = None
    opp_team_id: Optional[str] = None
    bracket: int = 0
    judges: List[JudgeAssignment] = field(default_factory=list)
    flags: List[FlagKind] = field(default_factory=list)
    ballots: List[Ballot] = field(default_factory=list)
    result: Optional[Result] = None
    id: str = field(default_factory=lambda: generate_id("Pairing"))

    @property
    def is_bye(self) -> bool:
        return self.prop_team_id is None or self.opp_team_id is None

    @property
    def team_ids(self) -> List[str]:
        """Ids of the teams present in this pairing."""
        return [t for t in (self.prop_team_id, self.opp_team_id) if t is not None]

    @property
    def judge_ids(self) -> List[str]:
        return [j.judge_id for j in self.judges]

    @property
    def chair(self) -> Optional[JudgeAssignment]:
        for assignment in self.judges:
            if assignment.is_chair:
                return assignment
        return None

    def involves(self, team_id: str) -> bool:
        return team_id in self.team_ids

    def side_of(self, team_id: str) -> Optional[Side]:
        """Side the team argued, or None if the team is not in the pairing."""
        if team_id == self.prop_team_id:
            return Side.PROP
        if team_id == self.opp_team_id:
            return Side.OPP
        return None

    def opponent_of(self, team_id: str) -> Optional[str]:
        """Opponent of the team, None for a bye or an unrelated team."""
        if team_id == self.prop_team_id:
            return self.opp_team_id
        if team_id == self.opp_team_id:
            return self.prop_team_id
        return None

    def team_for_side(self, side: Side) -> Optional[str]:
        return self.prop_team_id if side is Side.PROP else self.opp_team_id

    def to_dict(self) -> Dict[str, Any]:
        """Serialize pairing to dictionary."""
        return {
            "id": self.id,
            "round_number": self.round_number,
            "prop_team_id": self.prop_team_id,
            "opp_team_id": self.opp_team_id,
            "bracket": self.bracket,
            "judges": [j.to_dict() for j in self.judges],
            "flags": [f.value for f in self.flags],
            "ballots": [b.to_dict() for b in self.ballots],
            "result": self.result.to_dict() if self.result else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Pairing":
        """Deserialize pairing from dictionary."""
        result = data.get("result")
        return cls(
            id=data["id"],
            round_number=data["round_number"],
            prop_team_id=data.get("prop_team_id"),
            opp_team_id=data.get("opp_team_id"),
            bracket=data.get("bracket", 0),
            judges=[JudgeAssignment.from_dict(j) for j in data.get("judges", [])],
            flags=[FlagKind(f) for f in data.get("flags", [])],
            ballots=[Ballot.from_dict(b) for b in data.get("ballots", [])],
            result=Result.from_dict(result) if result else None,
        )


@dataclass
class Round:
    """Container for all data related to a single tournament round.

    Attributes
    ----------
    number : int
        Round number (1-indexed).
    motion : str
        Motion debated in the round.
    status : DrawStatus
        Pairings are mutable only while the draw is a draft.
    pairings : list of Pairing
        Pairings in draw order.
    published_at : datetime or None
        When the draw was last published.
    """

    number: int
    motion: str = ""
    tournament_id: Optional[str] = None
    status: DrawStatus = DrawStatus.DRAFT
    pairings: List[Pairing] = field(default_factory=list)
    published_at: Optional[datetime] = None

    @property
    def is_published(self) -> bool:
        return self.status is DrawStatus.PUBLISHED

    @property
    def debates(self) -> List[Pairing]:
        """Pairings that need a panel, i.e. everything except the bye."""
        return [p for p in self.pairings if not p.is_bye]

    def get_pairing(self, pairing_id: str) -> Optional[Pairing]:
        for pairing in self.pairings:
            if pairing.id == pairing_id:
                return pairing
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Serialize round data to dictionary."""
        return {
            "number": self.number,
            "motion": self.motion,
            "tournament_id": self.tournament_id,
            "status": self.status.value,
            "pairings": [p.to_dict() for p in self.pairings],
            "published_at": (
                self.published_at.isoformat() if self.published_at else None
            ),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Round":
        """Deserialize round data from dictionary."""
        published_at = data.get("published_at")
        return cls(
            number=data["number"],
            motion=data.get("motion", ""),
            tournament_id=data.get("tournament_id"),
            status=DrawStatus(data.get("status", DrawStatus.DRAFT.value)),
            pairings=[Pairing.from_dict(p) for p in data.get("pairings", [])],
            published_at=isoparse(published_at) if published_at else None,
        )
