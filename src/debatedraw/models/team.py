"""Team data class."""

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

from debatedraw.utils import generate_id


@dataclass
class Team:
    """A debating team registered in a tournament.

    Attributes
    ----------
    name : str
        Display name of the team.
    institution_id : str or None
        Owning institution, used for conflict checks.
    tournament_id : str or None
        Tournament the team belongs to.
    is_active : bool
        Withdrawn teams are kept for history but are not drawn.
    id : str
        Unique identifier.
    """

    name: str
    institution_id: Optional[str] = None
    tournament_id: Optional[str] = None
    is_active: bool = True
    id: str = field(default_factory=lambda: generate_id("Team"))

    def shares_institution(self, other: Optional["Team"]) -> bool:
        """Check if both teams belong to the same known institution."""
        if other is None or self.institution_id is None:
            return False
        return self.institution_id == other.institution_id

    def to_dict(self) -> Dict[str, Any]:
        """Serialize team to dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "institution_id": self.institution_id,
            "tournament_id": self.tournament_id,
            "is_active": self.is_active,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Team":
        """Deserialize team from dictionary."""
        return cls(
            id=data["id"],
            name=data["name"],
            institution_id=data.get("institution_id"),
            tournament_id=data.get("tournament_id"),
            is_active=data.get("is_active", True),
        )
