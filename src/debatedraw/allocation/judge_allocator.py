"""Judge allocation: seating adjudicators on the debates of a round."""

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

from collections import Counter
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Set, Tuple

from debatedraw.constants import (
    ALLOC_ROUND_ROBIN,
    ALLOC_WEIGHTED,
    ALLOCATION_STRATEGIES,
    BRACKET_IMPORTANCE_FACTOR,
    DEFAULT_ALLOCATION_STRATEGY,
    DEFAULT_CONFLICT_PENALTY,
    DEFAULT_STRENGTH_MISMATCH_PENALTY,
    LOAD_PENALTY,
    MAX_JUDGE_RATING,
    ROUND_IMPORTANCE_FACTOR,
)
from debatedraw.exceptions import (
    InvalidConfigurationException,
    NoEligibleJudgeException,
    NoJudgesException,
    NoPairingsException,
    TeamNotFoundException,
)
from debatedraw.models import (
    AllocationResult,
    JudgeAssignment,
    Pairing,
    Participation,
    Round,
    Team,
)
from debatedraw.tournament import StandingsCalculator
from debatedraw.utils import setup_logger

logger = setup_logger(__name__)

# Chooses a judge for a pairing from an ordered candidate list, or None
Picker = Callable[[Pairing, List[Participation]], Optional[Participation]]


class JudgeAllocator:
    """Builds judge panels for the debates of one round.

    Both strategies share the same shape: a base allocation of
    ``max(1, judges // debates)`` seats per debate filled seat by seat across
    the debates, then leftover sweeps that add at most one judge per debate
    per sweep. They differ in debate order and in which candidate takes a
    seat:

    - ``round_robin`` serves the highest bracket first and seats the next
      judge in rotation that has no institutional conflict. The first judge
      seated chairs.
    - ``weighted`` serves the most important debate first and seats the judge
      of lowest cost. The highest-rated panel member chairs.

    Hard constraints hold for both: a judge never sits on a debate involving
    their own institution (unless independent) and never twice on one panel.
    """

    def __init__(
        self,
        strategy: str = DEFAULT_ALLOCATION_STRATEGY,
        conflict_penalty: float = DEFAULT_CONFLICT_PENALTY,
        strength_mismatch_penalty: float = DEFAULT_STRENGTH_MISMATCH_PENALTY,
        standings_calculator: Optional[StandingsCalculator] = None,
    ) -> None:
        if strategy not in ALLOCATION_STRATEGIES:
            raise InvalidConfigurationException(
                f"Unknown allocation strategy '{strategy}'"
            )
        self.strategy = strategy
        self.conflict_penalty = conflict_penalty
        self.strength_mismatch_penalty = strength_mismatch_penalty
        self.standings_calculator = standings_calculator or StandingsCalculator()

    def allocate(
        self,
        pairings: Sequence[Pairing],
        judges: Sequence[Participation],
        teams: Dict[str, Team],
        round_number: Optional[int] = None,
        rounds: Iterable[Round] = (),
    ) -> AllocationResult:
        """Allocate judges to the debates of a round.

        Args:
            pairings: Pairings of the round; byes are skipped
            judges: Registered participations; only judges are seated
            teams: Teams by id, for institutional conflict checks
            round_number: Round being allocated, defaults to the pairings' round
            rounds: Earlier rounds, used by the weighted strategy

        Returns:
            AllocationResult with one panel per debate

        Raises:
            NoJudgesException: If no judge is registered
            NoPairingsException: If the round has no debates yet
            NoEligibleJudgeException: If every judge is conflicted for a debate
        """
        pool = [judge for judge in judges if judge.is_judge]
        if not pool:
            raise NoJudgesException("No judges are registered for this tournament")
        debates = [pairing for pairing in pairings if not pairing.is_bye]
        if not debates:
            raise NoPairingsException(
                "The round has no pairings; generate the draw first"
            )
        if round_number is None:
            round_number = debates[0].round_number
        for pairing in debates:
            self._teams_of(pairing, teams)

        result = AllocationResult(round_number=round_number, strategy=self.strategy)
        result.panels = {pairing.id: [] for pairing in debates}
        logger.info(
            f"Allocating {len(pool)} judges to {len(debates)} debates "
            f"in round {round_number} ({self.strategy})"
        )

        if self.strategy == ALLOC_WEIGHTED:
            ordered, picker = self._weighted_plan(
                debates, pool, teams, round_number, rounds, result
            )
        else:
            ordered = sorted(debates, key=lambda p: -p.bracket)
            picker = self._first_eligible_picker(teams, result)

        self._fill_panels(ordered, pool, picker, result)

        if self.strategy == ALLOC_WEIGHTED:
            ratings = {judge.id: judge.rating for judge in pool}
            for panel in result.panels.values():
                self._seat_best_rated_chair(panel, ratings)

        if result.double_booked:
            logger.warning(
                f"Round {round_number}: {len(result.double_booked)} judges sit on "
                f"more than one debate ({len(pool)} judges for {len(debates)} debates)"
            )
        if result.unallocated:
            logger.warning(
                f"Round {round_number}: {len(result.unallocated)} judges could not "
                f"be seated without a conflict"
            )
        return result

    def _fill_panels(
        self,
        debates: List[Pairing],
        pool: List[Participation],
        pick: Picker,
        result: AllocationResult,
    ) -> None:
        """Run the base allocation, then the leftover sweeps."""
        per_pairing = max(1, len(pool) // len(debates))
        unused = list(pool)
        cursor = 0

        for seat in range(per_pairing):
            for pairing in debates:
                panel = result.panels[pairing.id]
                judge = pick(pairing, unused)
                if judge is not None:
                    unused.remove(judge)
                elif not panel:
                    judge = self._move_seated_judge(
                        pairing, debates, pool, unused, pick, result, set()
                    )
                    if judge is not None:
                        panel.append(JudgeAssignment(judge.id, is_chair=True))
                        continue
                    # No judge is free for this debate, even after moving
                    # seated ones: reuse one in rotation
                    rotation = pool[cursor:] + pool[:cursor]
                    judge = pick(pairing, rotation)
                    if judge is None:
                        raise NoEligibleJudgeException(
                            f"Every judge is conflicted for pairing {pairing.id}"
                        )
                    cursor = (pool.index(judge) + 1) % len(pool)
                    if judge.id not in result.double_booked:
                        result.double_booked.append(judge.id)
                else:
                    continue
                panel.append(JudgeAssignment(judge.id, is_chair=not panel))

        # Leftover sweeps land on distinct debates before any gets another judge
        while unused:
            placed = False
            for pairing in debates:
                judge = pick(pairing, unused)
                if judge is None:
                    continue
                unused.remove(judge)
                result.panels[pairing.id].append(JudgeAssignment(judge.id))
                placed = True
            if not placed:
                break

        result.unallocated = [judge.id for judge in unused]

    def _move_seated_judge(
        self,
        pairing: Pairing,
        debates: List[Pairing],
        pool: List[Participation],
        unused: List[Participation],
        pick: Picker,
        result: AllocationResult,
        visited: Set[str],
    ) -> Optional[Participation]:
        """Free a seated judge who can sit on ``pairing``.

        The judge's old seat goes to an unused judge, or to a judge freed the
        same way from a further debate. The freed judge is returned and is no
        longer on any panel; ``None`` when no chain of moves exists.
        """
        by_id = {judge.id: judge for judge in pool}
        for other in debates:
            if other.id == pairing.id or other.id in visited:
                continue
            panel = result.panels[other.id]
            for index, assignment in enumerate(panel):
                judge = by_id[assignment.judge_id]
                if judge.id in result.double_booked or pick(pairing, [judge]) is None:
                    continue
                visited.add(other.id)
                del panel[index]
                replacement = pick(other, unused)
                if replacement is not None:
                    unused.remove(replacement)
                else:
                    replacement = self._move_seated_judge(
                        other, debates, pool, unused, pick, result, visited
                    )
                if replacement is None:
                    panel.insert(index, assignment)
                    continue
                panel.insert(
                    index, JudgeAssignment(replacement.id, is_chair=assignment.is_chair)
                )
                return judge
        return None

    def _first_eligible_picker(
        self, teams: Dict[str, Team], result: AllocationResult
    ) -> Picker:
        def pick(
            pairing: Pairing, candidates: List[Participation]
        ) -> Optional[Participation]:
            for judge in candidates:
                if self._can_sit(judge, pairing, teams, result):
                    return judge
            return None

        return pick

    def _weighted_plan(
        self,
        debates: List[Pairing],
        pool: List[Participation],
        teams: Dict[str, Team],
        round_number: int,
        rounds: Iterable[Round],
        result: AllocationResult,
    ) -> Tuple[List[Pairing], Picker]:
        """Order debates by importance and build the lowest-cost picker."""
        earlier_rounds = [r for r in rounds if r.number < round_number]
        standings = self.standings_calculator.compute_standings(
            teams.values(), earlier_rounds
        )
        wins = {row.team_id: row.wins for row in standings}

        importance = {}
        for pairing in debates:
            team_wins = [wins.get(team_id, 0) for team_id in pairing.team_ids]
            importance[pairing.id] = (
                round_number * ROUND_IMPORTANCE_FACTOR
                + sum(team_wins) / len(team_wins) * BRACKET_IMPORTANCE_FACTOR
            )
        top = max(importance.values()) or 1.0
        targets = {
            pairing_id: MAX_JUDGE_RATING * value / top
            for pairing_id, value in importance.items()
        }

        seen = self._teams_seen_by_judge(earlier_rounds)
        ordered = sorted(debates, key=lambda p: -importance[p.id])

        def pick(
            pairing: Pairing, candidates: List[Participation]
        ) -> Optional[Participation]:
            eligible = [
                judge
                for judge in candidates
                if self._can_sit(judge, pairing, teams, result)
            ]
            if not eligible:
                return None
            loads = Counter(
                a.judge_id for panel in result.panels.values() for a in panel
            )
            return min(
                eligible,
                key=lambda judge: self._cost(
                    judge, pairing, targets[pairing.id], loads, seen
                ),
            )

        return ordered, pick

    def _cost(
        self,
        judge: Participation,
        pairing: Pairing,
        target: float,
        loads: Counter,
        seen: Dict[str, Set[str]],
    ) -> float:
        """Cost of seating a judge: rating shortfall, repeat exposure and load."""
        cost = max(0.0, target - judge.rating) * self.strength_mismatch_penalty
        if seen.get(judge.id, set()) & set(pairing.team_ids):
            cost += self.conflict_penalty
        return cost + loads[judge.id] * LOAD_PENALTY

    @staticmethod
    def _teams_seen_by_judge(rounds: Iterable[Round]) -> Dict[str, Set[str]]:
        seen: Dict[str, Set[str]] = {}
        for round_data in rounds:
            for pairing in round_data.debates:
                for judge_id in pairing.judge_ids:
                    seen.setdefault(judge_id, set()).update(pairing.team_ids)
        return seen

    @staticmethod
    def _seat_best_rated_chair(
        panel: List[JudgeAssignment], ratings: Dict[str, float]
    ) -> None:
        """Move the chair to the highest-rated member; ties keep seating order."""
        if not panel:
            return
        best = max(panel, key=lambda a: ratings.get(a.judge_id, 0.0))
        for assignment in panel:
            assignment.is_chair = assignment is best
        panel.remove(best)
        panel.insert(0, best)

    def _can_sit(
        self,
        judge: Participation,
        pairing: Pairing,
        teams: Dict[str, Team],
        result: AllocationResult,
    ) -> bool:
        if judge.id in {a.judge_id for a in result.panels[pairing.id]}:
            return False
        return not judge.has_hard_conflict(*self._teams_of(pairing, teams))

    @staticmethod
    def _teams_of(pairing: Pairing, teams: Dict[str, Team]) -> List[Team]:
        found = []
        for team_id in pairing.team_ids:
            if team_id not in teams:
                raise TeamNotFoundException(
                    f"Team {team_id} of pairing {pairing.id} is not registered"
                )
            found.append(teams[team_id])
        return found


def strategy_label(strategy: str) -> str:
    """Human readable name of an allocation strategy."""
    return {
        ALLOC_ROUND_ROBIN: "Round robin",
        ALLOC_WEIGHTED: "Weighted by importance",
    }.get(strategy, strategy)
