import pytest

from debatedraw.allocation import JudgeAllocator, strategy_label
from debatedraw.constants import ALLOC_ROUND_ROBIN, ALLOC_WEIGHTED
from debatedraw.exceptions import (
    InvalidConfigurationException,
    NoEligibleJudgeException,
    NoJudgesException,
    NoPairingsException,
    TeamNotFoundException,
)
from debatedraw.models import (
    JudgeAssignment,
    Pairing,
    Participation,
    Result,
    Role,
    Round,
    Side,
    Team,
)


def _teams(*specs):
    """Teams from (id, institution) tuples, keyed by id."""
    return {
        team_id: Team(name=team_id.upper(), id=team_id, institution_id=institution)
        for team_id, institution in specs
    }


def _judge(judge_id, rating=5.0, institution=None, independent=False):
    return Participation(
        name=judge_id,
        role=Role.JUDGE,
        institution_id=institution,
        rating=rating,
        is_independent=independent,
        id=judge_id,
    )


def _pairing(pairing_id, prop, opp, round_number=1, bracket=0):
    return Pairing(
        round_number=round_number,
        prop_team_id=prop,
        opp_team_id=opp,
        bracket=bracket,
        id=pairing_id,
    )


def _ids(panel):
    return [assignment.judge_id for assignment in panel]


def _six_teams():
    return _teams(*[(f"t{i}", None) for i in range(1, 7)])


def _three_pairings():
    return [
        _pairing("p1", "t1", "t2"),
        _pairing("p2", "t3", "t4"),
        _pairing("p3", "t5", "t6"),
    ]


def test_round_robin_spreads_leftover_judges_across_debates():
    judges = [_judge(f"j{i}") for i in range(1, 6)]

    result = JudgeAllocator(ALLOC_ROUND_ROBIN).allocate(
        _three_pairings(), judges, _six_teams()
    )

    assert _ids(result.panel_of("p1")) == ["j1", "j4"]
    assert _ids(result.panel_of("p2")) == ["j2", "j5"]
    assert _ids(result.panel_of("p3")) == ["j3"]
    assert [result.chair_of(p) for p in ("p1", "p2", "p3")] == ["j1", "j2", "j3"]
    assert result.double_booked == []
    assert result.unallocated == []


def test_every_panel_has_exactly_one_chair():
    judges = [_judge(f"j{i}") for i in range(1, 8)]

    result = JudgeAllocator(ALLOC_ROUND_ROBIN).allocate(
        _three_pairings(), judges, _six_teams()
    )

    for panel in result.panels.values():
        assert sum(1 for a in panel if a.is_chair) == 1
        assert len(set(_ids(panel))) == len(panel)
    assert sorted(result.panel_sizes.values()) == [2, 2, 3]


def test_fewer_judges_than_debates_reuses_judges():
    judges = [_judge("j1"), _judge("j2")]

    result = JudgeAllocator(ALLOC_ROUND_ROBIN).allocate(
        _three_pairings(), judges, _six_teams()
    )

    assert _ids(result.panel_of("p3")) == ["j1"]
    assert result.double_booked == ["j1"]
    assert all(result.panel_of(p) for p in ("p1", "p2", "p3"))


@pytest.mark.parametrize("strategy", [ALLOC_ROUND_ROBIN, ALLOC_WEIGHTED])
def test_seated_judge_moves_over_before_anyone_is_reused(strategy):
    teams = _teams(("a", "x"), ("b", "y"), ("c", "z"), ("d", "w"))
    pairings = [
        _pairing("p1", "c", "d", bracket=1),
        _pairing("p2", "a", "b", bracket=0),
    ]
    judges = [_judge("j_ind", independent=True), _judge("j_x", institution="x")]

    result = JudgeAllocator(strategy).allocate(pairings, judges, teams)

    assert _ids(result.panel_of("p1")) == ["j_x"]
    assert _ids(result.panel_of("p2")) == ["j_ind"]
    assert result.chair_of("p1") == "j_x"
    assert result.chair_of("p2") == "j_ind"
    assert result.double_booked == []
    assert result.unallocated == []


def test_highest_bracket_is_served_first():
    teams = _teams(("a", None), ("b", None), ("c", None), ("d", None))
    pairings = [
        _pairing("p_low", "a", "b", bracket=0),
        _pairing("p_high", "c", "d", bracket=1),
    ]
    judges = [_judge("j1"), _judge("j2"), _judge("j3")]

    result = JudgeAllocator(ALLOC_ROUND_ROBIN).allocate(pairings, judges, teams)

    assert _ids(result.panel_of("p_high")) == ["j1", "j3"]
    assert _ids(result.panel_of("p_low")) == ["j2"]


def test_judge_never_sits_on_own_institution():
    teams = _teams(("a", "x"), ("b", "y"), ("c", "z"), ("d", "w"))
    pairings = [_pairing("p1", "a", "b"), _pairing("p2", "c", "d")]
    judges = [_judge("j1", institution="x"), _judge("j2")]

    result = JudgeAllocator(ALLOC_ROUND_ROBIN).allocate(pairings, judges, teams)

    assert _ids(result.panel_of("p1")) == ["j2"]
    assert _ids(result.panel_of("p2")) == ["j1"]


def test_independent_judge_is_never_conflicted():
    teams = _teams(("a", "x"), ("b", "y"))
    judges = [_judge("j1", institution="x", independent=True)]

    result = JudgeAllocator().allocate([_pairing("p1", "a", "b")], judges, teams)

    assert _ids(result.panel_of("p1")) == ["j1"]


def test_conflicted_leftover_judge_is_reported_unallocated():
    teams = _teams(("a", "x"), ("b", "y"))
    judges = [_judge("j1"), _judge("j2", institution="x")]

    result = JudgeAllocator().allocate([_pairing("p1", "a", "b")], judges, teams)

    assert _ids(result.panel_of("p1")) == ["j1"]
    assert result.unallocated == ["j2"]


def test_every_judge_conflicted_raises():
    teams = _teams(("a", "x"), ("b", "y"))
    judges = [_judge("j1", institution="x")]

    with pytest.raises(NoEligibleJudgeException):
        JudgeAllocator().allocate([_pairing("p1", "a", "b")], judges, teams)


def test_missing_inputs_are_rejected():
    teams = _teams(("a", None), ("b", None))
    debater = Participation(name="Speaker", role=Role.DEBATER, team_id="a")

    with pytest.raises(NoJudgesException):
        JudgeAllocator().allocate([_pairing("p1", "a", "b")], [debater], teams)
    with pytest.raises(NoPairingsException):
        JudgeAllocator().allocate([_pairing("bye", "a", None)], [_judge("j1")], teams)
    with pytest.raises(TeamNotFoundException):
        JudgeAllocator().allocate([_pairing("p1", "a", "zz")], [_judge("j1")], teams)


def test_unknown_strategy_is_rejected():
    with pytest.raises(InvalidConfigurationException):
        JudgeAllocator("alphabetical")


def test_byes_get_no_panel():
    teams = _teams(("a", None), ("b", None), ("c", None))
    pairings = [_pairing("p1", "a", "b"), _pairing("bye", "c", None)]

    result = JudgeAllocator().allocate(pairings, [_judge("j1"), _judge("j2")], teams)

    assert "bye" not in result.panels
    assert _ids(result.panel_of("p1")) == ["j1", "j2"]


def test_weighted_seats_best_rated_judges_and_chairs():
    teams = _teams(("a", None), ("b", None), ("c", None), ("d", None))
    pairings = [_pairing("p1", "a", "b"), _pairing("p2", "c", "d")]
    judges = [
        _judge("j1", rating=3.0),
        _judge("j2", rating=9.0),
        _judge("j3", rating=6.0),
        _judge("j4", rating=5.0),
    ]

    result = JudgeAllocator(ALLOC_WEIGHTED).allocate(pairings, judges, teams)

    assert _ids(result.panel_of("p1")) == ["j2", "j4"]
    assert _ids(result.panel_of("p2")) == ["j3", "j1"]
    assert result.chair_of("p1") == "j2"
    assert result.chair_of("p2") == "j3"


def test_weighted_avoids_judges_who_saw_the_teams_before():
    teams = _teams(("a", None), ("b", None), ("c", None), ("d", None))
    round_one = Round(
        number=1,
        pairings=[_pairing("r1a", "a", "b"), _pairing("r1b", "c", "d")],
    )
    for pairing, winner, judge_id in zip(round_one.pairings, ("a", "c"), ("j1", "j2")):
        pairing.result = Result(
            winner_team_id=winner,
            loser_team_id=pairing.opponent_of(winner),
            winning_side=Side.PROP,
        )
        pairing.judges = [JudgeAssignment(judge_id, is_chair=True)]
    pairings = [
        _pairing("bottom", "b", "d", round_number=2),
        _pairing("top", "a", "c", round_number=2),
    ]
    judges = [
        _judge("j1", rating=9.0),
        _judge("j2", rating=5.0),
        _judge("j3", rating=8.0),
    ]

    result = JudgeAllocator(ALLOC_WEIGHTED).allocate(
        pairings, judges, teams, round_number=2, rounds=[round_one]
    )

    assert result.chair_of("top") == "j3"
    assert _ids(result.panel_of("bottom")) == ["j1"]


def test_strategy_labels():
    assert strategy_label(ALLOC_ROUND_ROBIN) == "Round robin"
    assert strategy_label(ALLOC_WEIGHTED) == "Weighted by importance"
    assert strategy_label("custom") == "custom"
