"""Ballot and result data classes."""

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

from debatedraw.models.enums import BallotStatus, Side


@dataclass
class SpeakerScore:
    """Score one judge gave one speaker."""

    speaker_id: str
    team_id: str
    score: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "speaker_id": self.speaker_id,
            "team_id": self.team_id,
            "score": self.score,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SpeakerScore":
        return cls(
            speaker_id=data["speaker_id"],
            team_id=data["team_id"],
            score=data.get("score"),
        )


@dataclass
class Ballot:
    """A single judge's decision on a pairing.

    Attributes
    ----------
    judge_id : str
        Participation id of the judge.
    winner_team_id : str or None
        Team the judge voted for.
    status : BallotStatus
        Only SUBMITTED and CONFIRMED ballots are aggregated.
    speaker_scores : list of SpeakerScore
        Individual speaker scores on this ballot.
    """

    judge_id: str
    winner_team_id: Optional[str] = None
    status: BallotStatus = BallotStatus.SUBMITTED
    speaker_scores: List[SpeakerScore] = field(default_factory=list)

    def team_total(self, team_id: str) -> Optional[float]:
        """Sum of the scored speakers of a team, or None if none were scored."""
        scores = [
            s.score
            for s in self.speaker_scores
            if s.team_id == team_id and s.score is not None
        ]
        if not scores:
            return None
        return sum(scores)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "judge_id": self.judge_id,
            "winner_team_id": self.winner_team_id,
            "status": self.status.value,
            "speaker_scores": [s.to_dict() for s in self.speaker_scores],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Ballot":
        return cls(
            judge_id=data["judge_id"],
            winner_team_id=data.get("winner_team_id"),
            status=BallotStatus(data.get("status", BallotStatus.SUBMITTED.value)),
            speaker_scores=[
                SpeakerScore.from_dict(s) for s in data.get("speaker_scores", [])
            ],
        )


@dataclass
class Result:
    """Aggregated outcome of a pairing.

    Attributes
    ----------
    winner_team_id : str
        Winning team.
    loser_team_id : str
        Losing team.
    winning_side : Side
        Side the winner argued.
    panel_votes_prop : int
        Ballots for proposition.
    panel_votes_opp : int
        Ballots for opposition.
    prop_avg_score : float or None
        Average proposition team total across ballots.
    opp_avg_score : float or None
        Average opposition team total across ballots.
    is_final : bool
        Locked results are immutable until reopened.
    finalized_at : datetime or None
        When the result was locked.
    """

    winner_team_id: str
    loser_team_id: str
    winning_side: Side
    panel_votes_prop: int = 0
    panel_votes_opp: int = 0
    prop_avg_score: Optional[float] = None
    opp_avg_score: Optional[float] = None
    is_final: bool = False
    finalized_at: Optional[datetime] = None

    @property
    def vote_split(self) -> str:
        """Panel split as displayed on the draw, e.g. ``2-1``."""
        return f"{self.panel_votes_prop}-{self.panel_votes_opp}"

    def to_dict(self) -> Dict[str, Any]:
        """Serialize result to dictionary."""
        return {
            "winner_team_id": self.winner_team_id,
            "loser_team_id": self.loser_team_id,
            "winning_side": self.winning_side.value,
            "panel_votes_prop": self.panel_votes_prop,
            "panel_votes_opp": self.panel_votes_opp,
            "prop_avg_score": self.prop_avg_score,
            "opp_avg_score": self.opp_avg_score,
            "is_final": self.is_final,
            "finalized_at": (
                self.finalized_at.isoformat() if self.finalized_at else None
            ),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Result":
        """Deserialize result from dictionary."""
        finalized_at = data.get("finalized_at")
        return cls(
            winner_team_id=data["winner_team_id"],
            loser_team_id=data["loser_team_id"],
            winning_side=Side(data["winning_side"]),
            panel_votes_prop=data.get("panel_votes_prop", 0),
            panel_votes_opp=data.get("panel_votes_opp", 0),
            prop_avg_score=data.get("prop_avg_score"),
            opp_avg_score=data.get("opp_avg_score"),
            is_final=data.get("is_final", False),
            finalized_at=isoparse(finalized_at) if finalized_at else None,
        )
