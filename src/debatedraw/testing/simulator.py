"""Tournament simulator - random debate tournaments for exercising the engine.

Teams, judges and speakers are generated with hidden strengths, every round
is drawn, allocated, validated, published and decided through the
RoundManager, and the resulting tournament can be exported as a save file.
"""

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

import json
import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from debatedraw.constants import (
    DEFAULT_ALLOCATION_STRATEGY,
    MAX_JUDGE_RATING,
    MIN_JUDGE_RATING,
)
from debatedraw.controllers import RoundManager
from debatedraw.exceptions import ManualResolutionRequired
from debatedraw.models import (
    Ballot,
    FlagKind,
    Pairing,
    Participation,
    Role,
    SpeakerScore,
    StandingRow,
    Team,
    TournamentConfig,
)
from debatedraw.storage import TournamentStore
from debatedraw.utils import setup_logger
from debatedraw.validation import DrawChecker, ValidationReport

logger = setup_logger(__name__)


class ResultPattern(Enum):
    """Result generation patterns for simulated debates."""

    REALISTIC = "realistic"
    PREDICTABLE = "predictable"
    UPSET_FRIENDLY = "upset_friendly"
    RANDOM = "random"


@dataclass
class SimulatorConfig:
    """Configuration for the tournament simulator."""

    num_teams: int
    num_rounds: int
    num_judges: Optional[int] = None
    num_institutions: Optional[int] = None
    speakers_per_team: int = 2
    independent_rate: float = 0.2
    withdrawal_rate: float = 0.0
    result_pattern: ResultPattern = ResultPattern.REALISTIC
    allocation_strategy: str = DEFAULT_ALLOCATION_STRATEGY
    seed: Optional[int] = None
    validate: bool = True

    def __post_init__(self):
        if self.num_judges is None:
            self.num_judges = max(1, (self.num_teams // 2) * 3 // 2)
        if self.num_institutions is None:
            self.num_institutions = max(3, self.num_teams // 3)


@dataclass
class SimulationResult:
    """Everything a simulation produced."""

    store: TournamentStore
    strengths: Dict[str, float]
    reports: Dict[int, ValidationReport] = field(default_factory=dict)
    manual_resolutions: int = 0

    @property
    def standings(self) -> List[StandingRow]:
        return RoundManager(self.store).standings()

    @property
    def hard_violations(self) -> int:
        return sum(len(report.violations) for report in self.reports.values())

    def flag_counts(self) -> Dict[str, int]:
        counts = {kind.value: 0 for kind in FlagKind}
        for round_data in self.store.all_rounds():
            for pairing in round_data.pairings:
                for flag in pairing.flags:
                    counts[flag.value] += 1
        return counts

    def summary(self) -> Dict[str, object]:
        return {
            "name": self.store.config.name,
            "teams": len(self.store.teams),
            "judges": len(self.store.judges),
            "rounds": len(self.store.rounds),
            "hard_violations": self.hard_violations,
            "flags": self.flag_counts(),
            "manual_resolutions": self.manual_resolutions,
        }


class TeamFactory:
    """Factory for creating teams and their speakers."""

    def __init__(self, config: SimulatorConfig, rng: random.Random):
        self.config = config
        self.random = rng

    def create_teams(self, institution_ids: List[str]) -> List[Team]:
        teams = []
        for i in range(self.config.num_teams):
            institution = institution_ids[i % len(institution_ids)]
            teams.append(
                Team(name=f"{institution.upper()} {i + 1:02d}", institution_id=institution)
            )
        logger.info(
            "Created %s teams across %s institutions", len(teams), len(institution_ids)
        )
        return teams

    def create_strengths(self, teams: List[Team]) -> Dict[str, float]:
        """Hidden team strength in [0, 1], used to decide debates."""
        return {
            team.id: max(0.0, min(1.0, self.random.gauss(0.5, 0.18)))
            for team in teams
        }

    def create_speakers(self, teams: List[Team]) -> List[Participation]:
        speakers = []
        for team in teams:
            for seat in range(self.config.speakers_per_team):
                speakers.append(
                    Participation(
                        name=f"{team.name} speaker {seat + 1}",
                        role=Role.DEBATER,
                        team_id=team.id,
                        institution_id=team.institution_id,
                    )
                )
        return speakers


class JudgeFactory:
    """Factory for creating adjudicators."""

    def __init__(self, config: SimulatorConfig, rng: random.Random):
        self.config = config
        self.random = rng

    def create_judges(self, institution_ids: List[str]) -> List[Participation]:
        # Always at least one independent judge
        count = self.config.num_judges
        num_independent = min(count, max(1, round(count * self.config.independent_rate)))
        independent_seats = set(self.random.sample(range(count), num_independent))
        judges = []
        for i in range(self.config.num_judges):
            independent = i in independent_seats
            rating = round(
                max(
                    MIN_JUDGE_RATING,
                    min(MAX_JUDGE_RATING, self.random.gauss(6.0, 2.0)),
                ),
                1,
            )
            judges.append(
                Participation(
                    name=f"Judge-{i + 1:03d}",
                    role=Role.JUDGE,
                    institution_id=(
                        None if independent else self.random.choice(institution_ids)
                    ),
                    rating=rating,
                    is_independent=independent,
                )
            )
        logger.info("Created %s judges", len(judges))
        return judges


class ResultSimulator:
    """Simulates judges' ballots for a debate."""

    def __init__(self, config: SimulatorConfig, rng: random.Random):
        self.config = config
        self.random = rng

    def prop_win_probability(self, prop_strength: float, opp_strength: float) -> float:
        diff = prop_strength - opp_strength
        if self.config.result_pattern == ResultPattern.RANDOM:
            return 0.5
        if self.config.result_pattern == ResultPattern.PREDICTABLE:
            return max(0.02, min(0.98, 0.5 + diff * 3))
        if self.config.result_pattern == ResultPattern.UPSET_FRIENDLY:
            return max(0.2, min(0.8, 0.5 + diff / 2))
        return max(0.05, min(0.95, 0.5 + diff * 1.5))

    def simulate_ballots(
        self,
        pairing: Pairing,
        strengths: Dict[str, float],
        speakers: Dict[str, List[Participation]],
    ) -> List[Ballot]:
        """One submitted ballot per panel member."""
        prop, opp = pairing.prop_team_id, pairing.opp_team_id
        p_prop = self.prop_win_probability(strengths[prop], strengths[opp])
        ballots = []
        for judge_id in pairing.judge_ids:
            winner = prop if self.random.random() < p_prop else opp
            scores = []
            for team_id in (prop, opp):
                bonus = 1.0 if team_id == winner else 0.0
                for speaker in speakers.get(team_id, []):
                    score = 75 + strengths[team_id] * 4 + bonus + self.random.gauss(0, 1)
                    scores.append(
                        SpeakerScore(speaker.id, team_id, round(score * 2) / 2)
                    )
            ballots.append(Ballot(judge_id, winner_team_id=winner, speaker_scores=scores))
        return ballots


class TournamentSimulator:
    """Runs a complete random tournament through the round lifecycle."""

    def __init__(self, config: SimulatorConfig):
        self.config = config
        self.random = (
            random.Random(config.seed) if config.seed is not None else random.Random()
        )
        self.team_factory = TeamFactory(config, self.random)
        self.judge_factory = JudgeFactory(config, self.random)
        self.result_simulator = ResultSimulator(config, self.random)
        self.checker = DrawChecker()

    def build_store(self) -> TournamentStore:
        """Register teams, speakers and judges in a fresh store."""
        config = TournamentConfig(
            name=f"Simulated {self.config.num_teams}-team tournament",
            num_rounds=self.config.num_rounds,
            allocation_strategy=self.config.allocation_strategy,
        )
        store = TournamentStore(config)
        institutions = [f"inst{i + 1}" for i in range(self.config.num_institutions)]
        for team in self.team_factory.create_teams(institutions):
            store.add_team(team)
        for speaker in self.team_factory.create_speakers(list(store.teams.values())):
            store.add_participation(speaker)
        for judge in self.judge_factory.create_judges(institutions):
            store.add_participation(judge)
        return store

    def run(self) -> SimulationResult:
        logger.info(
            "Simulating tournament: %s teams, %s judges, %s rounds",
            self.config.num_teams,
            self.config.num_judges,
            self.config.num_rounds,
        )
        store = self.build_store()
        result = SimulationResult(
            store=store,
            strengths=self.team_factory.create_strengths(list(store.teams.values())),
        )
        manager = RoundManager(store)
        speakers = {team_id: store.speakers_of(team_id) for team_id in store.teams}

        for number in range(1, self.config.num_rounds + 1):
            self._maybe_withdraw(store)
            manager.create_round(number, motion=f"Motion for round {number}")
            manager.generate_draw(number)
            manager.allocate_judges(number)

            if self.config.validate:
                report = self.checker.check_round(
                    store.get_round(number),
                    store.teams,
                    judges={j.id: j for j in store.judges},
                    earlier_rounds=store.rounds_before(number),
                    eligible_team_ids=[t.id for t in store.active_teams],
                )
                result.reports[number] = report
                if not report.is_valid:
                    logger.error("Round %s failed validation: %s", number, report.summary)

            manager.publish_round(number)
            for pairing in store.get_round(number).debates:
                for ballot in self.result_simulator.simulate_ballots(
                    pairing, result.strengths, speakers
                ):
                    manager.submit_ballot(number, pairing.id, ballot)
                try:
                    manager.aggregate_result(number, pairing.id, finalize=True)
                except ManualResolutionRequired:
                    # Settle as an administrator would: the stronger team
                    stronger = max(pairing.team_ids, key=lambda t: result.strengths[t])
                    manager.override_result(number, pairing.id, stronger)
                    result.manual_resolutions += 1

        logger.info("Simulation complete")
        return result

    def _maybe_withdraw(self, store: TournamentStore) -> None:
        if self.config.withdrawal_rate <= 0:
            return
        for team in store.active_teams:
            if len(store.active_teams) <= 2:
                break
            if self.random.random() < self.config.withdrawal_rate:
                team.is_active = False
                logger.info("Team %s withdrew", team.name)


def export_json_format(result: SimulationResult) -> str:
    """Save-file JSON of the simulated tournament plus its validation summary."""
    data = result.store.to_dict()
    data["simulation"] = result.summary()
    data["validation"] = {
        str(number): {
            "summary": report.summary,
            "hard_violations": [v.check for v in report.violations],
            "soft_warnings": [w.check for w in report.soft_warnings],
        }
        for number, report in result.reports.items()
    }
    return json.dumps(data, indent=2)


def create_small_simulation(
    num_teams: int = 8, seed: Optional[int] = None
) -> TournamentSimulator:
    """Create small tournament for testing."""
    return TournamentSimulator(
        SimulatorConfig(num_teams=num_teams, num_rounds=3, seed=seed)
    )


def create_standard_simulation(
    num_teams: int = 24, seed: Optional[int] = None
) -> TournamentSimulator:
    """Create standard tournament for development testing."""
    return TournamentSimulator(
        SimulatorConfig(num_teams=num_teams, num_rounds=5, seed=seed)
    )


def create_large_simulation(
    num_teams: int = 64, seed: Optional[int] = None
) -> TournamentSimulator:
    """Create large tournament for performance testing."""
    return TournamentSimulator(
        SimulatorConfig(num_teams=num_teams, num_rounds=7, seed=seed)
    )
