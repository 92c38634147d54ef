"""Participation data class: a person's role within a tournament."""

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
from typing import Any, Dict, Optional

from debatedraw.constants import (
    DEFAULT_JUDGE_RATING,
    MAX_JUDGE_RATING,
    MIN_JUDGE_RATING,
)
from debatedraw.exceptions import (
    InvalidParticipationException,
    RatingValidationException,
)
from debatedraw.models.enums import Role
from debatedraw.models.team import Team
from debatedraw.utils import generate_id


@dataclass
class Participation:
    """A person taking part in a tournament as a debater or a judge.

    Attributes
    ----------
    name : str
        Display name of the person.
    role : Role
        DEBATER or JUDGE.
    team_id : str or None
        Team of a debater. Judges never carry a team.
    institution_id : str or None
        Institution used for conflict checks.
    rating : float
        Judge experience rating, 0 to 10.
    is_independent : bool
        Independent judges have no institutional affiliation and are never
        conflicted.
    """

    name: str
    role: Role
    tournament_id: Optional[str] = None
    team_id: Optional[str] = None
    institution_id: Optional[str] = None
    rating: float = DEFAULT_JUDGE_RATING
    is_independent: bool = False
    id: str = field(default_factory=lambda: generate_id("Participation"))

    def __post_init__(self) -> None:
        if isinstance(self.role, str):
            self.role = Role(self.role)
        if self.role is Role.JUDGE:
            if self.team_id is not None:
                raise InvalidParticipationException(
                    f"Judge {self.name} cannot belong to team {self.team_id}"
                )
            if not MIN_JUDGE_RATING <= self.rating <= MAX_JUDGE_RATING:
                raise RatingValidationException(
                    f"Judge rating must be between {MIN_JUDGE_RATING:g} and "
                    f"{MAX_JUDGE_RATING:g}, got {self.rating}"
                )

    @property
    def is_judge(self) -> bool:
        return self.role is Role.JUDGE

    @property
    def is_debater(self) -> bool:
        return self.role is Role.DEBATER

    def has_hard_conflict(self, *teams: Optional[Team]) -> bool:
        """Check if this judge shares an institution with any of the teams."""
        if self.is_independent or self.institution_id is None:
            return False
        return any(
            team is not None and team.institution_id == self.institution_id
            for team in teams
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize participation to dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "role": self.role.value,
            "tournament_id": self.tournament_id,
            "team_id": self.team_id,
            "institution_id": self.institution_id,
            "rating": self.rating,
            "is_independent": self.is_independent,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Participation":
        """Deserialize participation from dictionary."""
        return cls(
            id=data["id"],
            name=data["name"],
            role=Role(data["role"]),
            tournament_id=data.get("tournament_id"),
            team_id=data.get("team_id"),
            institution_id=data.get("institution_id"),
            rating=data.get("rating", DEFAULT_JUDGE_RATING),
            is_independent=data.get("is_independent", False),
        )
