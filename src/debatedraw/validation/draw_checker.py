"""Draw checker - invariant validation of draws and judge allocations.

Hard checks cover properties a correct draw or allocation can never break
(every team exactly once, one chair per panel, no conflicted judge, ...).
Soft checks report accepted constraint violations such as rematches, which
are allowed but must be surfaced to the administrator.
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

from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, Optional, Sequence

from debatedraw.models import Pairing, PairingHistory, Participation, Round, Team
from debatedraw.type_hints import PairingTuple
from debatedraw.utils import setup_logger

logger = setup_logger(__name__)


class CheckStatus(Enum):
    """Status of a single check."""

    PASSED = "PASSED"
    VIOLATION = "VIOLATION"
    NOT_APPLICABLE = "NOT_APPLICABLE"


class ViolationType(Enum):
    """Severity of a violation."""

    HARD = "HARD"  # Never allowed
    SOFT = "SOFT"  # Allowed, flagged for review


@dataclass
class CheckResult:
    """Result of one check."""

    check: str
    status: CheckStatus
    violation_type: Optional[ViolationType] = None
    description: str = ""
    details: Dict[str, object] = field(default_factory=dict)

    @property
    def is_violation(self) -> bool:
        return self.status == CheckStatus.VIOLATION


@dataclass
class ValidationReport:
    """Complete validation report for a draw or allocation."""

    total_checks: int
    passed_count: int
    violations: List[CheckResult]
    overall_status: CheckStatus
    summary: str
    soft_warnings: List[CheckResult] = field(default_factory=list)
    check_results: List[CheckResult] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        """True when no hard check failed."""
        return self.overall_status != CheckStatus.VIOLATION

    @property
    def pass_percentage(self) -> float:
        if self.total_checks == 0:
            return 100.0
        return (self.passed_count / self.total_checks) * 100.0

    @classmethod
    def from_results(cls, results: List[CheckResult]) -> "ValidationReport":
        hard = [
            r
            for r in results
            if r.is_violation and r.violation_type == ViolationType.HARD
        ]
        soft = [
            r
            for r in results
            if r.is_violation and r.violation_type == ViolationType.SOFT
        ]
        passed = sum(1 for r in results if r.status == CheckStatus.PASSED)
        status = CheckStatus.VIOLATION if hard else CheckStatus.PASSED
        if hard:
            summary = (
                f"{len(hard)} hard violations detected; {len(soft)} soft warnings"
            )
        else:
            summary = f"All hard checks passed; {len(soft)} soft warnings"
        return cls(
            total_checks=len(results),
            passed_count=passed,
            violations=hard,
            overall_status=status,
            summary=summary,
            soft_warnings=soft,
            check_results=results,
        )


def _passed(check: str, description: str) -> CheckResult:
    return CheckResult(check=check, status=CheckStatus.PASSED, description=description)


def _violation(
    check: str, violation_type: ViolationType, description: str, **details
) -> CheckResult:
    return CheckResult(
        check=check,
        status=CheckStatus.VIOLATION,
        violation_type=violation_type,
        description=description,
        details=details,
    )


class DrawChecker:
    """Checks draws and judge allocations against the tournament invariants."""

    # ========== Draw checks ==========

    def check_draw(
        self,
        pairings: Sequence[PairingTuple],
        eligible_team_ids: Iterable[str],
        earlier_rounds: Iterable[Round] = (),
        teams: Optional[Dict[str, Team]] = None,
    ) -> ValidationReport:
        """Validate the pairings of one round.

        Args:
            pairings: ``(prop, opp)`` tuples; a bye has one side None
            eligible_team_ids: Teams that had to be drawn
            earlier_rounds: Rounds before this one, for rematch and bye history
            teams: Teams by id; enables the institution check
        """
        eligible = list(eligible_team_ids)
        history = PairingHistory.from_rounds(earlier_rounds)
        results = [
            self.check_each_team_once(pairings, eligible),
            self.check_no_self_pairing(pairings),
            self.check_no_duplicate_pairing(pairings),
            self.check_bye_count(pairings, len(eligible)),
            self.check_no_repeat_bye(pairings, eligible, history),
            self.check_rematches(pairings, history),
        ]
        if teams is not None:
            results.append(self.check_institution_clashes(pairings, teams))

        report = ValidationReport.from_results(results)
        logger.info(f"Draw check complete: {report.summary}")
        return report

    def check_each_team_once(
        self, pairings: Sequence[PairingTuple], eligible: List[str]
    ) -> CheckResult:
        """Every eligible team appears exactly once, and nobody else appears."""
        seen = Counter(t for pair in pairings for t in pair if t is not None)
        repeated = sorted(t for t, n in seen.items() if n > 1)
        missing = sorted(t for t in eligible if t not in seen)
        eligible_set = set(eligible)
        unexpected = sorted(t for t in seen if t not in eligible_set)
        if repeated or missing or unexpected:
            return _violation(
                "each_team_once",
                ViolationType.HARD,
                "Draw does not contain every eligible team exactly once",
                repeated=repeated,
                missing=missing,
                unexpected=unexpected,
            )
        return _passed("each_team_once", f"All {len(eligible)} teams drawn once")

    def check_no_self_pairing(self, pairings: Sequence[PairingTuple]) -> CheckResult:
        for prop, opp in pairings:
            if prop is not None and prop == opp:
                return _violation(
                    "no_self_pairing",
                    ViolationType.HARD,
                    f"Team {prop} is paired against itself",
                    team_id=prop,
                )
        return _passed("no_self_pairing", "No team debates itself")

    def check_no_duplicate_pairing(
        self, pairings: Sequence[PairingTuple]
    ) -> CheckResult:
        counts = Counter(
            frozenset(pair) for pair in pairings if None not in pair
        )
        duplicated = [sorted(pair) for pair, n in counts.items() if n > 1]
        if duplicated:
            return _violation(
                "no_duplicate_pairing",
                ViolationType.HARD,
                f"{len(duplicated)} pairings appear twice in the round",
                pairs=duplicated,
            )
        return _passed("no_duplicate_pairing", "Every pairing is unique")

    def check_bye_count(
        self, pairings: Sequence[PairingTuple], team_count: int
    ) -> CheckResult:
        """Exactly one bye for an odd pool, none for an even pool."""
        byes = sum(1 for pair in pairings if None in pair)
        expected = team_count % 2
        if byes != expected:
            return _violation(
                "bye_count",
                ViolationType.HARD,
                f"Expected {expected} byes for {team_count} teams, found {byes}",
                byes=byes,
            )
        return _passed("bye_count", f"{byes} byes for {team_count} teams")

    def check_no_repeat_bye(
        self,
        pairings: Sequence[PairingTuple],
        eligible: List[str],
        history: PairingHistory,
    ) -> CheckResult:
        """A second bye is only allowed when every team has had one."""
        bye_teams = [t for pair in pairings if None in pair for t in pair if t]
        if not bye_teams:
            return CheckResult(
                check="no_repeat_bye",
                status=CheckStatus.NOT_APPLICABLE,
                description="No bye assigned in this round",
            )
        bye_team = bye_teams[0]
        fewest = min((history.bye_counts[t] for t in eligible), default=0)
        if history.bye_counts[bye_team] > fewest:
            return _violation(
                "no_repeat_bye",
                ViolationType.HARD,
                f"Repeat bye for {bye_team} while a team with fewer byes exists",
                team_id=bye_team,
                bye_count=history.bye_counts[bye_team],
            )
        return _passed("no_repeat_bye", f"Bye assignment valid: {bye_team}")

    def check_rematches(
        self, pairings: Sequence[PairingTuple], history: PairingHistory
    ) -> CheckResult:
        rematches = [
            [prop, opp]
            for prop, opp in pairings
            if prop and opp and history.have_met(prop, opp)
        ]
        if rematches:
            return _violation(
                "rematch",
                ViolationType.SOFT,
                f"{len(rematches)} accepted rematches",
                pairs=rematches,
            )
        return _passed("rematch", "No rematches")

    def check_institution_clashes(
        self, pairings: Sequence[PairingTuple], teams: Dict[str, Team]
    ) -> CheckResult:
        clashes = [
            [prop, opp]
            for prop, opp in pairings
            if prop in teams
            and opp in teams
            and teams[prop].shares_institution(teams[opp])
        ]
        if clashes:
            return _violation(
                "institution_clash",
                ViolationType.SOFT,
                f"{len(clashes)} same-institution pairings",
                pairs=clashes,
            )
        return _passed("institution_clash", "No same-institution pairings")

    # ========== Allocation checks ==========

    def check_allocation(
        self,
        pairings: Sequence[Pairing],
        judges: Dict[str, Participation],
        teams: Dict[str, Team],
    ) -> ValidationReport:
        """Validate the panels of a round's debates."""
        debates = [p for p in pairings if not p.is_bye]
        results = [
            self.check_panels_present(debates),
            self.check_one_chair(debates),
            self.check_no_duplicate_judge(debates),
            self.check_no_hard_conflict(debates, judges, teams),
            self.check_double_booking(debates),
        ]
        report = ValidationReport.from_results(results)
        logger.info(f"Allocation check complete: {report.summary}")
        return report

    def check_panels_present(self, debates: Sequence[Pairing]) -> CheckResult:
        empty = [p.id for p in debates if not p.judges]
        if empty:
            return _violation(
                "panel_present",
                ViolationType.HARD,
                f"{len(empty)} debates have no judge",
                pairings=empty,
            )
        return _passed("panel_present", "Every debate has a judge")

    def check_one_chair(self, debates: Sequence[Pairing]) -> CheckResult:
        wrong = {
            p.id: sum(1 for a in p.judges if a.is_chair)
            for p in debates
            if sum(1 for a in p.judges if a.is_chair) != 1
        }
        if wrong:
            return _violation(
                "one_chair",
                ViolationType.HARD,
                f"{len(wrong)} debates do not have exactly one chair",
                chairs=wrong,
            )
        return _passed("one_chair", "Every debate has one chair")

    def check_no_duplicate_judge(self, debates: Sequence[Pairing]) -> CheckResult:
        duplicated = [
            p.id for p in debates if len(set(p.judge_ids)) != len(p.judge_ids)
        ]
        if duplicated:
            return _violation(
                "no_duplicate_judge",
                ViolationType.HARD,
                "A judge sits twice on the same panel",
                pairings=duplicated,
            )
        return _passed("no_duplicate_judge", "No judge sits twice on a panel")

    def check_no_hard_conflict(
        self,
        debates: Sequence[Pairing],
        judges: Dict[str, Participation],
        teams: Dict[str, Team],
    ) -> CheckResult:
        conflicts = []
        for pairing in debates:
            pairing_teams = [teams.get(t) for t in pairing.team_ids]
            for judge_id in pairing.judge_ids:
                judge = judges.get(judge_id)
                if judge is not None and judge.has_hard_conflict(*pairing_teams):
                    conflicts.append([pairing.id, judge_id])
        if conflicts:
            return _violation(
                "no_hard_conflict",
                ViolationType.HARD,
                f"{len(conflicts)} judges share an institution with a team they judge",
                conflicts=conflicts,
            )
        return _passed("no_hard_conflict", "No conflicted judge is seated")

    def check_double_booking(self, debates: Sequence[Pairing]) -> CheckResult:
        seats = Counter(j for p in debates for j in p.judge_ids)
        booked = sorted(j for j, n in seats.items() if n > 1)
        if booked:
            return _violation(
                "double_booking",
                ViolationType.SOFT,
                f"{len(booked)} judges sit on more than one debate",
                judges=booked,
            )
        return _passed("double_booking", "No judge sits twice in the round")

    # ========== Whole rounds ==========

    def check_round(
        self,
        round_data: Round,
        teams: Dict[str, Team],
        judges: Optional[Dict[str, Participation]] = None,
        earlier_rounds: Iterable[Round] = (),
        eligible_team_ids: Optional[Iterable[str]] = None,
    ) -> ValidationReport:
        """Validate a stored round: its draw, and its panels when judges are given.

        Eligibility defaults to the teams that appear in the round, so
        only the draw's internal consistency is checked unless the
        eligible pool is passed in.
        """
        pairings = [(p.prop_team_id, p.opp_team_id) for p in round_data.pairings]
        if eligible_team_ids is None:
            eligible_team_ids = [t for p in round_data.pairings for t in p.team_ids]
        draw_report = self.check_draw(pairings, eligible_team_ids, earlier_rounds, teams)
        results = list(draw_report.check_results)
        if judges is not None:
            results.extend(
                self.check_allocation(round_data.pairings, judges, teams).check_results
            )
        return ValidationReport.from_results(results)
