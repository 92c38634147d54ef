"""In-process tournament storage with atomic transactions and JSON save files."""

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

import copy
import json
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Union

from debatedraw.constants import SAVE_FILE_EXTENSION
from debatedraw.exceptions import (
    DuplicateRoundException,
    FileLoadException,
    FileSaveException,
    InvalidParticipationException,
    ParticipationNotFoundException,
    RoundNotFoundException,
    TeamNotFoundException,
)
from debatedraw.models import Participation, Round, Team, TournamentConfig
from debatedraw.utils import generate_id, setup_logger

logger = setup_logger(__name__)


class TournamentStore:
    """Holds the persisted rows of one tournament.

    Every multi-step change should run inside :meth:`transaction`: the store
    is locked for the duration and rolled back to its previous contents if
    the block raises. Rollback replaces the stored objects, so references
    taken inside a failed transaction must not be reused afterwards.
    """

    def __init__(
        self, config: TournamentConfig, tournament_id: Optional[str] = None
    ) -> None:
        self.id = tournament_id or generate_id("Tournament")
        self.config = config
        self.teams: Dict[str, Team] = {}
        self.participations: Dict[str, Participation] = {}
        self.rounds: Dict[int, Round] = {}
        self._lock = threading.RLock()

    # ========== Transactions ==========

    @contextmanager
    def transaction(self) -> Iterator["TournamentStore"]:
        """Run a block atomically: all of its changes apply or none do."""
        with self._lock:
            snapshot = copy.deepcopy(
                (self.config, self.teams, self.participations, self.rounds)
            )
            try:
                yield self
            except Exception:
                self.config, self.teams, self.participations, self.rounds = snapshot
                logger.debug("Transaction rolled back")
                raise

    # ========== Teams and participations ==========

    def add_team(self, team: Team) -> Team:
        with self._lock:
            team.tournament_id = self.id
            self.teams[team.id] = team
        return team

    def get_team(self, team_id: str) -> Team:
        try:
            return self.teams[team_id]
        except KeyError:
            raise TeamNotFoundException(f"Team {team_id} is not registered") from None

    def add_participation(self, participation: Participation) -> Participation:
        if participation.team_id is not None and participation.team_id not in self.teams:
            raise InvalidParticipationException(
                f"{participation.name} belongs to unknown team {participation.team_id}"
            )
        with self._lock:
            participation.tournament_id = self.id
            self.participations[participation.id] = participation
        return participation

    def get_participation(self, participation_id: str) -> Participation:
        try:
            return self.participations[participation_id]
        except KeyError:
            raise ParticipationNotFoundException(
                f"Participation {participation_id} is not registered"
            ) from None

    @property
    def active_teams(self) -> List[Team]:
        return [team for team in self.teams.values() if team.is_active]

    @property
    def judges(self) -> List[Participation]:
        return [p for p in self.participations.values() if p.is_judge]

    @property
    def debaters(self) -> List[Participation]:
        return [p for p in self.participations.values() if p.is_debater]

    def speakers_of(self, team_id: str) -> List[Participation]:
        return [p for p in self.debaters if p.team_id == team_id]

    # ========== Rounds ==========

    def add_round(self, round_data: Round) -> Round:
        with self._lock:
            if round_data.number in self.rounds:
                raise DuplicateRoundException(
                    f"Round {round_data.number} already exists"
                )
            round_data.tournament_id = self.id
            self.rounds[round_data.number] = round_data
        return round_data

    def get_round(self, number: int) -> Round:
        try:
            return self.rounds[number]
        except KeyError:
            raise RoundNotFoundException(f"Round {number} does not exist") from None

    def all_rounds(self) -> List[Round]:
        """Rounds in number order."""
        return [self.rounds[number] for number in sorted(self.rounds)]

    def rounds_before(self, number: int) -> List[Round]:
        return [r for r in self.all_rounds() if r.number < number]

    # ========== Serialization ==========

    def to_dict(self) -> Dict[str, Any]:
        """Serialize tournament to dictionary."""
        return {
            "id": self.id,
            "config": self.config.to_dict(),
            "teams": [t.to_dict() for t in self.teams.values()],
            "participations": [p.to_dict() for p in self.participations.values()],
            "rounds": [r.to_dict() for r in self.all_rounds()],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TournamentStore":
        """Deserialize tournament from dictionary."""
        store = cls(
            TournamentConfig.from_dict(data.get("config", {})),
            tournament_id=data.get("id"),
        )
        for team_data in data.get("teams", []):
            team = Team.from_dict(team_data)
            store.teams[team.id] = team
        for participation_data in data.get("participations", []):
            participation = Participation.from_dict(participation_data)
            store.participations[participation.id] = participation
        for round_data in data.get("rounds", []):
            loaded = Round.from_dict(round_data)
            store.rounds[loaded.number] = loaded
        return store

    def save(self, path: Union[str, Path]) -> Path:
        """Write the tournament to a JSON save file.

        A path without an extension gets ``.json`` appended.

        Raises:
            FileSaveException: If the file cannot be written
        """
        path = Path(path)
        if not path.suffix:
            path = path.with_suffix(SAVE_FILE_EXTENSION)
        with self._lock:
            data = self.to_dict()
        try:
            with open(path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=4)
        except OSError as e:
            raise FileSaveException(f"Could not save tournament to {path}: {e}") from e
        logger.info(f"Tournament saved to {path}")
        return path

    @classmethod
    def load(cls, path: Union[str, Path]) -> "TournamentStore":
        """Read a tournament from a JSON save file.

        Raises:
            FileLoadException: If the file is missing or malformed
        """
        path = Path(path)
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
            store = cls.from_dict(data)
        except (OSError, json.JSONDecodeError) as e:
            raise FileLoadException(f"Could not load tournament from {path}: {e}") from e
        except (KeyError, TypeError, ValueError) as e:
            raise FileLoadException(f"Malformed tournament file {path}: {e}") from e
        logger.info(
            f"Loaded tournament '{store.config.name}' with {len(store.teams)} teams "
            f"and {len(store.rounds)} rounds from {path}"
        )
        return store
