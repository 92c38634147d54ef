from debatedraw.models import (
    JudgeAssignment,
    Pairing,
    Participation,
    Role,
    Round,
    Team,
)
from debatedraw.validation import CheckStatus, DrawChecker, ViolationType


def _by_check(report):
    return {result.check: result for result in report.check_results}


def _round(number, *pairs):
    return Round(
        number=number,
        pairings=[
            Pairing(round_number=number, prop_team_id=prop, opp_team_id=opp)
            for prop, opp in pairs
        ],
    )


def _debate(pairing_id, prop, opp, *judges):
    return Pairing(
        round_number=1,
        prop_team_id=prop,
        opp_team_id=opp,
        judges=[
            JudgeAssignment(judge_id, is_chair=chair) for judge_id, chair in judges
        ],
        id=pairing_id,
    )


def test_valid_draw_passes_every_check():
    report = DrawChecker().check_draw(
        [("a", "b"), ("c", "d"), ("e", None)], ["a", "b", "c", "d", "e"]
    )

    assert report.is_valid
    assert report.violations == []
    assert report.soft_warnings == []
    assert report.pass_percentage == 100.0
    assert report.summary == "All hard checks passed; 0 soft warnings"


def test_missing_and_repeated_teams_are_hard_violations():
    report = DrawChecker().check_draw([("a", "b"), ("b", "c")], ["a", "b", "c", "d"])

    result = _by_check(report)["each_team_once"]
    assert not report.is_valid
    assert result.violation_type is ViolationType.HARD
    assert result.details["repeated"] == ["b"]
    assert result.details["missing"] == ["d"]


def test_self_and_duplicate_pairings_are_hard_violations():
    checker = DrawChecker()

    assert checker.check_no_self_pairing([("a", "a")]).is_violation
    assert checker.check_no_duplicate_pairing([("a", "b"), ("b", "a")]).is_violation


def test_bye_count_matches_pool_parity():
    checker = DrawChecker()

    assert checker.check_bye_count([("a", "b"), ("c", None)], 3).status is (
        CheckStatus.PASSED
    )
    assert checker.check_bye_count([("a", None), ("b", None)], 2).is_violation
    assert checker.check_bye_count([("a", "b")], 3).is_violation


def test_repeat_bye_is_flagged_only_when_avoidable():
    earlier = [_round(1, ("a", "b"), ("c", None))]
    checker = DrawChecker()

    repeat = checker.check_draw([("a", "b"), ("c", None)], ["a", "b", "c"], earlier)
    fresh = checker.check_draw([("a", "c"), ("b", None)], ["a", "b", "c"], earlier)

    assert _by_check(repeat)["no_repeat_bye"].is_violation
    assert _by_check(fresh)["no_repeat_bye"].status is CheckStatus.PASSED


def test_rematches_and_institution_clashes_are_soft():
    teams = {
        "a": Team(name="A", id="a", institution_id="x"),
        "b": Team(name="B", id="b", institution_id="x"),
        "c": Team(name="C", id="c"),
        "d": Team(name="D", id="d"),
    }
    earlier = [_round(1, ("c", "d"), ("a", "b"))]

    report = DrawChecker().check_draw(
        [("a", "b"), ("c", "d")], list(teams), earlier, teams
    )

    assert report.is_valid
    assert {w.check for w in report.soft_warnings} == {"rematch", "institution_clash"}
    assert _by_check(report)["rematch"].details["pairs"] == [["a", "b"], ["c", "d"]]


def test_allocation_checks():
    teams = {
        "a": Team(name="A", id="a", institution_id="x"),
        "b": Team(name="B", id="b"),
        "c": Team(name="C", id="c"),
        "d": Team(name="D", id="d"),
    }
    judges = {
        "j1": Participation(name="J1", role=Role.JUDGE, institution_id="x", id="j1"),
        "j2": Participation(name="J2", role=Role.JUDGE, id="j2"),
    }
    debates = [
        _debate("p1", "a", "b", ("j1", True), ("j2", True)),
        _debate("p2", "c", "d", ("j2", False)),
        Pairing(round_number=1, prop_team_id="e", id="bye"),
    ]

    report = DrawChecker().check_allocation(debates, judges, teams)

    results = _by_check(report)
    assert results["panel_present"].status is CheckStatus.PASSED
    assert results["one_chair"].details["chairs"] == {"p1": 2, "p2": 0}
    assert results["no_hard_conflict"].details["conflicts"] == [["p1", "j1"]]
    assert results["double_booking"].violation_type is ViolationType.SOFT
    assert len(report.violations) == 2


def test_check_round_combines_draw_and_panels():
    teams = {t: Team(name=t.upper(), id=t) for t in ("a", "b", "c")}
    judges = {"j1": Participation(name="J1", role=Role.JUDGE, id="j1")}
    round_data = Round(
        number=1,
        pairings=[
            _debate("p1", "a", "b", ("j1", True)),
            Pairing(round_number=1, prop_team_id="c", id="bye"),
        ],
    )

    report = DrawChecker().check_round(round_data, teams, judges=judges)

    assert report.is_valid
    assert "one_chair" in _by_check(report)
    assert "institution_clash" in _by_check(report)

    missing_team = DrawChecker().check_round(
        round_data, teams, eligible_team_ids=["a", "b", "c", "d"]
    )
    assert not missing_team.is_valid
