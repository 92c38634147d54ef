"""Round management for tournaments.

This module handles the administrative operations of a round: drawing it,
seating judges, publishing, and recording results. Every operation runs
against a TournamentStore and either completes or leaves the store
untouched.
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

from datetime import datetime
from typing import List, Optional, Sequence

from debatedraw.allocation import JudgeAllocator
from debatedraw.exceptions import (
    AssignmentNotFoundException,
    DuplicateAssignmentException,
    HardConflictException,
    InvalidParticipationException,
    InvalidPairingException,
    RoundNotReadyException,
    RoundPublishedException,
)
from debatedraw.models import (
    AllocationResult,
    Ballot,
    DrawResult,
    DrawStatus,
    FlagKind,
    JudgeAssignment,
    Pairing,
    PairingHistory,
    Result,
    Round,
    StandingRow,
)
from debatedraw.pairing import DrawGenerator
from debatedraw.results import ResultAggregator
from debatedraw.storage import TournamentStore
from debatedraw.tournament import StandingsCalculator
from debatedraw.utils import setup_logger

logger = setup_logger(__name__)


class RoundManager:
    """Manages the rounds of one tournament.

    This class is responsible for:
    - Creating rounds and generating their draws
    - Allocating judges, in bulk or one at a time
    - Publishing and unpublishing draws
    - Aggregating, locking and overriding results

    Draws and panels of a published round are frozen; ballots and results
    can be entered whatever the status.
    """

    def __init__(
        self,
        store: TournamentStore,
        standings_calculator: Optional[StandingsCalculator] = None,
        draw_generator: Optional[DrawGenerator] = None,
        judge_allocator: Optional[JudgeAllocator] = None,
        result_aggregator: Optional[ResultAggregator] = None,
    ):
        config = store.config
        self.store = store
        self.standings_calculator = standings_calculator or StandingsCalculator()
        self.draw_generator = draw_generator or DrawGenerator(
            max_swap_attempts=config.max_swap_attempts,
            avoid_same_institution=config.avoid_same_institution,
            standings_calculator=self.standings_calculator,
        )
        self.judge_allocator = judge_allocator or self._make_allocator(
            config.allocation_strategy
        )
        self.result_aggregator = result_aggregator or ResultAggregator()

    # ========== Rounds and draws ==========

    def create_round(self, number: Optional[int] = None, motion: str = "") -> Round:
        """Create an empty draft round.

        Args:
            number: Round number, defaults to the one after the last round
            motion: Motion debated in the round

        Raises:
            ValueError: If the number is not positive
            DuplicateRoundException: If the round already exists
        """
        if number is None:
            number = max(self.store.rounds, default=0) + 1
        if number < 1:
            raise ValueError(f"Round numbers start at 1, got {number}")
        round_data = self.store.add_round(Round(number=number, motion=motion))
        logger.info(f"Created round {number}")
        return round_data

    def generate_draw(
        self, number: int, seed_order: Optional[Sequence[str]] = None
    ) -> DrawResult:
        """Draw a round, replacing any draft pairings it already has.

        The draw is computed before the round is touched; the published
        check and the replacement of the pairings happen in one transaction.

        Raises:
            RoundNotFoundException: If the round does not exist
            RoundPublishedException: If the round is published
            InsufficientTeamsException: If fewer than two teams are active
        """
        self._ensure_draft(self.store.get_round(number))

        teams = list(self.store.teams.values())
        earlier_rounds = self.store.rounds_before(number)
        standings = self.standings_calculator.compute_standings(teams, earlier_rounds)
        draw = self.draw_generator.generate(
            teams,
            number,
            rounds=earlier_rounds,
            seed_order=seed_order,
            standings=standings,
        )

        with self.store.transaction():
            round_data = self.store.get_round(number)
            self._ensure_draft(round_data)
            replaced = len(round_data.pairings)
            round_data.pairings = [
                Pairing(
                    round_number=number,
                    prop_team_id=drawn.prop_team_id,
                    opp_team_id=drawn.opp_team_id,
                    bracket=drawn.bracket,
                    flags=[flag.kind for flag in drawn.flags],
                )
                for drawn in draw.drawn
            ]

        logger.info(
            f"Round {number}: drew {len(draw.drawn)} pairings"
            + (f", replacing {replaced}" if replaced else "")
        )
        return draw

    def set_pairing_teams(
        self,
        number: int,
        pairing_id: str,
        prop_team_id: str,
        opp_team_id: Optional[str],
    ) -> Pairing:
        """Edit the teams of a draft pairing by hand.

        Flags are recomputed and judges now conflicted with either team are
        taken off the panel.

        Raises:
            RoundPublishedException: If the round is published
            InvalidPairingException: If the teams are equal or already drawn
            TeamNotFoundException: If a team is not registered
        """
        with self.store.transaction():
            round_data = self.store.get_round(number)
            self._ensure_draft(round_data)
            pairing = self._get_pairing(round_data, pairing_id)
            if prop_team_id == opp_team_id:
                raise InvalidPairingException("A team cannot debate itself")
            prop = self.store.get_team(prop_team_id)
            opp = self.store.get_team(opp_team_id) if opp_team_id else None
            for other in round_data.pairings:
                if other is pairing:
                    continue
                for team_id in (prop_team_id, opp_team_id):
                    if team_id is not None and other.involves(team_id):
                        raise InvalidPairingException(
                            f"Team {team_id} is already drawn in pairing {other.id}"
                        )

            pairing.prop_team_id = prop_team_id
            pairing.opp_team_id = opp_team_id
            pairing.flags = []
            if opp is not None:
                history = PairingHistory.from_rounds(self.store.rounds_before(number))
                if history.have_met(prop_team_id, opp_team_id):
                    pairing.flags.append(FlagKind.REMATCH)
                if self.store.config.avoid_same_institution and prop.shares_institution(
                    opp
                ):
                    pairing.flags.append(FlagKind.INSTITUTION_CLASH)
            else:
                pairing.judges = []

            for assignment in list(pairing.judges):
                judge = self.store.get_participation(assignment.judge_id)
                if judge.has_hard_conflict(prop, opp):
                    logger.warning(
                        f"Removed {judge.name} from pairing {pairing.id}: "
                        f"institutional conflict after team change"
                    )
                    self._unseat(pairing, assignment)
            self._refresh_double_booked_flags(round_data)

        logger.info(f"Round {number}: pairing {pairing_id} set by hand")
        return pairing

    def publish_round(self, number: int) -> Round:
        """Publish a round's draw and panels.

        Raises:
            RoundPublishedException: If the round is already published
            RoundNotReadyException: If the round has no pairings, or a debate
                lacks a judge or does not have exactly one chair
        """
        with self.store.transaction():
            round_data = self.store.get_round(number)
            self._ensure_draft(round_data)
            if not round_data.pairings:
                raise RoundNotReadyException(
                    f"Round {number} has no pairings; generate the draw first"
                )
            for pairing in round_data.debates:
                if not pairing.judges:
                    raise RoundNotReadyException(
                        f"Pairing {pairing.id} of round {number} has no judge"
                    )
                chairs = sum(1 for a in pairing.judges if a.is_chair)
                if chairs != 1:
                    raise RoundNotReadyException(
                        f"Pairing {pairing.id} of round {number} has {chairs} chairs"
                    )
            round_data.status = DrawStatus.PUBLISHED
            round_data.published_at = datetime.now()

        logger.info(f"Round {number} published")
        return round_data

    def unpublish_round(self, number: int) -> Round:
        with self.store.transaction():
            round_data = self.store.get_round(number)
            if not round_data.is_published:
                logger.warning(f"Round {number} is not published")
                return round_data
            round_data.status = DrawStatus.DRAFT
        logger.info(f"Round {number} unpublished")
        return round_data

    # ========== Judges ==========

    def allocate_judges(
        self, number: int, strategy: Optional[str] = None
    ) -> AllocationResult:
        """Rebuild every panel of a draft round.

        Args:
            number: Round to allocate
            strategy: Override of the configured allocation strategy

        Raises:
            RoundPublishedException: If the round is published
            NoJudgesException: If no judge is registered
            NoPairingsException: If the round has not been drawn
            RoundNotReadyException: If the draw changed during allocation
        """
        round_data = self.store.get_round(number)
        self._ensure_draft(round_data)
        allocator = self.judge_allocator
        if strategy is not None and strategy != allocator.strategy:
            allocator = self._make_allocator(strategy)

        allocation = allocator.allocate(
            round_data.pairings,
            self.store.judges,
            self.store.teams,
            round_number=number,
            rounds=self.store.rounds_before(number),
        )

        with self.store.transaction():
            round_data = self.store.get_round(number)
            self._ensure_draft(round_data)
            if {p.id for p in round_data.debates} != set(allocation.panels):
                raise RoundNotReadyException(
                    f"The draw of round {number} changed while judges were "
                    f"being allocated; allocate again"
                )
            for pairing in round_data.pairings:
                pairing.judges = list(allocation.panel_of(pairing.id))
            self._refresh_double_booked_flags(round_data)

        logger.info(
            f"Round {number}: seated judges on {len(allocation.panels)} debates"
        )
        return allocation

    def add_judge(
        self, number: int, pairing_id: str, judge_id: str, as_chair: bool = False
    ) -> Pairing:
        """Seat one judge on a draft pairing.

        The judge chairs if ``as_chair`` is set or the panel has no chair yet.

        Raises:
            InvalidParticipationException: If the participation is not a judge
            DuplicateAssignmentException: If the judge is already on the panel
            HardConflictException: If the judge shares an institution with a team
        """
        with self.store.transaction():
            round_data = self.store.get_round(number)
            self._ensure_draft(round_data)
            pairing = self._get_pairing(round_data, pairing_id)
            if pairing.is_bye:
                raise InvalidPairingException(f"Pairing {pairing_id} is a bye")
            judge = self.store.get_participation(judge_id)
            if not judge.is_judge:
                raise InvalidParticipationException(f"{judge.name} is not a judge")
            if judge_id in pairing.judge_ids:
                raise DuplicateAssignmentException(
                    f"{judge.name} already sits on pairing {pairing_id}"
                )
            teams = [self.store.get_team(team_id) for team_id in pairing.team_ids]
            if judge.has_hard_conflict(*teams):
                raise HardConflictException(
                    f"{judge.name} shares an institution with a team of "
                    f"pairing {pairing_id}"
                )

            assignment = JudgeAssignment(judge_id)
            pairing.judges.append(assignment)
            if as_chair or pairing.chair is None:
                self._make_chair(pairing, assignment)
            self._refresh_double_booked_flags(round_data)

        logger.info(f"Round {number}: {judge.name} added to pairing {pairing_id}")
        return pairing

    def remove_judge(self, number: int, pairing_id: str, judge_id: str) -> Pairing:
        """Take a judge off a draft pairing; the next panelist takes the chair."""
        with self.store.transaction():
            round_data = self.store.get_round(number)
            self._ensure_draft(round_data)
            pairing = self._get_pairing(round_data, pairing_id)
            self._unseat(pairing, self._get_assignment(pairing, judge_id))
            self._refresh_double_booked_flags(round_data)
        logger.info(f"Round {number}: judge {judge_id} removed from pairing {pairing_id}")
        return pairing

    def set_chair(self, number: int, pairing_id: str, judge_id: str) -> Pairing:
        with self.store.transaction():
            round_data = self.store.get_round(number)
            self._ensure_draft(round_data)
            pairing = self._get_pairing(round_data, pairing_id)
            self._make_chair(pairing, self._get_assignment(pairing, judge_id))
        return pairing

    # ========== Results ==========

    def submit_ballot(self, number: int, pairing_id: str, ballot: Ballot) -> Pairing:
        """Add a judge's ballot, replacing an earlier one from the same judge."""
        with self.store.transaction():
            pairing = self._get_pairing(self.store.get_round(number), pairing_id)
            if pairing.is_bye:
                raise InvalidPairingException(f"Pairing {pairing_id} is a bye")
            if ballot.judge_id not in pairing.judge_ids:
                raise AssignmentNotFoundException(
                    f"Judge {ballot.judge_id} does not sit on pairing {pairing_id}"
                )
            pairing.ballots = [
                b for b in pairing.ballots if b.judge_id != ballot.judge_id
            ]
            pairing.ballots.append(ballot)
        return pairing

    def aggregate_result(
        self, number: int, pairing_id: str, finalize: bool = False
    ) -> Result:
        with self.store.transaction():
            pairing = self._get_pairing(self.store.get_round(number), pairing_id)
            return self.result_aggregator.aggregate(pairing, finalize=finalize)

    def lock_result(self, number: int, pairing_id: str) -> Result:
        with self.store.transaction():
            pairing = self._get_pairing(self.store.get_round(number), pairing_id)
            return self.result_aggregator.lock(pairing)

    def reopen_result(self, number: int, pairing_id: str) -> Result:
        with self.store.transaction():
            pairing = self._get_pairing(self.store.get_round(number), pairing_id)
            return self.result_aggregator.reopen(pairing)

    def override_result(
        self, number: int, pairing_id: str, winner_team_id: str, finalize: bool = True
    ) -> Result:
        with self.store.transaction():
            pairing = self._get_pairing(self.store.get_round(number), pairing_id)
            return self.result_aggregator.override_winner(
                pairing, winner_team_id, finalize=finalize
            )

    def standings(self, up_to_round: Optional[int] = None) -> List[StandingRow]:
        """Current standings, optionally counting only rounds up to a number."""
        rounds = self.store.all_rounds()
        if up_to_round is not None:
            rounds = [r for r in rounds if r.number <= up_to_round]
        return self.standings_calculator.compute_standings(
            self.store.teams.values(), rounds
        )

    # ========== Helpers ==========

    def _make_allocator(self, strategy: str) -> JudgeAllocator:
        config = self.store.config
        return JudgeAllocator(
            strategy=strategy,
            conflict_penalty=config.conflict_penalty,
            strength_mismatch_penalty=config.strength_mismatch_penalty,
            standings_calculator=self.standings_calculator,
        )

    @staticmethod
    def _ensure_draft(round_data: Round) -> None:
        if round_data.is_published:
            raise RoundPublishedException(
                f"Round {round_data.number} is published; unpublish it first"
            )

    @staticmethod
    def _get_pairing(round_data: Round, pairing_id: str) -> Pairing:
        pairing = round_data.get_pairing(pairing_id)
        if pairing is None:
            raise InvalidPairingException(
                f"Pairing {pairing_id} is not part of round {round_data.number}"
            )
        return pairing

    @staticmethod
    def _get_assignment(pairing: Pairing, judge_id: str) -> JudgeAssignment:
        for assignment in pairing.judges:
            if assignment.judge_id == judge_id:
                return assignment
        raise AssignmentNotFoundException(
            f"Judge {judge_id} does not sit on pairing {pairing.id}"
        )

    @staticmethod
    def _make_chair(pairing: Pairing, chair: JudgeAssignment) -> None:
        for assignment in pairing.judges:
            assignment.is_chair = assignment is chair
        pairing.judges.remove(chair)
        pairing.judges.insert(0, chair)

    def _unseat(self, pairing: Pairing, assignment: JudgeAssignment) -> None:
        pairing.judges.remove(assignment)
        if assignment.is_chair and pairing.judges:
            self._make_chair(pairing, pairing.judges[0])

    @staticmethod
    def _refresh_double_booked_flags(round_data: Round) -> None:
        """Flag every debate whose panel shares a judge with another debate."""
        seats = {}
        for pairing in round_data.debates:
            for judge_id in pairing.judge_ids:
                seats[judge_id] = seats.get(judge_id, 0) + 1
        for pairing in round_data.pairings:
            flags = [f for f in pairing.flags if f is not FlagKind.JUDGE_DOUBLE_BOOKED]
            if any(seats.get(judge_id, 0) > 1 for judge_id in pairing.judge_ids):
                flags.append(FlagKind.JUDGE_DOUBLE_BOOKED)
            pairing.flags = flags
