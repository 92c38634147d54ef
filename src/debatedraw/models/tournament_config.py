"""TournamentConfig data class."""

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

from debatedraw.constants import (
    ALLOCATION_STRATEGIES,
    DEFAULT_ALLOCATION_STRATEGY,
    DEFAULT_CONFLICT_PENALTY,
    DEFAULT_MAX_SWAP_ATTEMPTS,
    DEFAULT_STRENGTH_MISMATCH_PENALTY,
)
from debatedraw.exceptions import InvalidConfigurationException


@dataclass
class TournamentConfig:
    """Tournament configuration settings.

    Attributes
    ----------
    name : str
        Tournament name.
    num_rounds : int
        Number of preliminary rounds.
    max_swap_attempts : int
        Candidates tried when resolving a rematch or institution clash before
        the conflict is accepted and flagged.
    avoid_same_institution : bool
        Whether the draw tries to keep teams of one institution apart.
    allocation_strategy : str
        ``"round_robin"`` or ``"weighted"``.
    conflict_penalty, strength_mismatch_penalty : float
        Cost model of the weighted allocation strategy.
    """

    name: str
    num_rounds: int = 5
    max_swap_attempts: int = DEFAULT_MAX_SWAP_ATTEMPTS
    avoid_same_institution: bool = True
    allocation_strategy: str = DEFAULT_ALLOCATION_STRATEGY
    conflict_penalty: float = DEFAULT_CONFLICT_PENALTY
    strength_mismatch_penalty: float = DEFAULT_STRENGTH_MISMATCH_PENALTY

    def __post_init__(self) -> None:
        if self.num_rounds < 1:
            raise InvalidConfigurationException(
                f"num_rounds must be positive, got {self.num_rounds}"
            )
        if self.max_swap_attempts < 0:
            raise InvalidConfigurationException(
                f"max_swap_attempts cannot be negative, got {self.max_swap_attempts}"
            )
        if self.allocation_strategy not in ALLOCATION_STRATEGIES:
            raise InvalidConfigurationException(
                f"Unknown allocation strategy '{self.allocation_strategy}'"
            )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize configuration to dictionary."""
        return {
            "name": self.name,
            "num_rounds": self.num_rounds,
            "max_swap_attempts": self.max_swap_attempts,
            "avoid_same_institution": self.avoid_same_institution,
            "allocation_strategy": self.allocation_strategy,
            "conflict_penalty": self.conflict_penalty,
            "strength_mismatch_penalty": self.strength_mismatch_penalty,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TournamentConfig":
        """Deserialize configuration from dictionary."""
        return cls(
            name=data.get("name", "Untitled Tournament"),
            num_rounds=data.get("num_rounds", 5),
            max_swap_attempts=data.get("max_swap_attempts", DEFAULT_MAX_SWAP_ATTEMPTS),
            avoid_same_institution=data.get("avoid_same_institution", True),
            allocation_strategy=data.get(
                "allocation_strategy", DEFAULT_ALLOCATION_STRATEGY
            ),
            conflict_penalty=data.get("conflict_penalty", DEFAULT_CONFLICT_PENALTY),
            strength_mismatch_penalty=data.get(
                "strength_mismatch_penalty", DEFAULT_STRENGTH_MISMATCH_PENALTY
            ),
        )
