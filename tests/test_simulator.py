import json
import random
from collections import Counter

import pytest

from debatedraw.constants import ALLOC_WEIGHTED
from debatedraw.testing import ResultPattern, SimulatorConfig, TournamentSimulator
from debatedraw.testing.simulator import (
    JudgeFactory,
    ResultSimulator,
    create_large_simulation,
    create_small_simulation,
    create_standard_simulation,
    export_json_format,
)


def _run(**kwargs):
    kwargs.setdefault("num_rounds", 3)
    kwargs.setdefault("seed", 7)
    return TournamentSimulator(SimulatorConfig(**kwargs)).run()


def test_config_defaults():
    config = SimulatorConfig(num_teams=16, num_rounds=5)

    assert config.num_judges == 12
    assert config.num_institutions == 5


def test_small_simulation_completes_every_round():
    result = create_small_simulation(seed=11).run()
    store = result.store

    assert sorted(store.rounds) == [1, 2, 3]
    assert result.hard_violations == 0
    for round_data in store.all_rounds():
        assert round_data.is_published
        drawn = [t for p in round_data.pairings for t in p.team_ids]
        assert sorted(drawn) == sorted(store.teams)
        for pairing in round_data.debates:
            assert pairing.result is not None
            assert pairing.result.is_final
            assert len(pairing.ballots) == len(pairing.judges)


@pytest.mark.parametrize("seed", [1, 2, 3, 4, 5])
@pytest.mark.parametrize("strategy", ["round_robin", ALLOC_WEIGHTED])
def test_odd_tournaments_hold_hard_constraints(seed, strategy):
    result = _run(num_teams=9, num_rounds=4, seed=seed, allocation_strategy=strategy)

    assert result.hard_violations == 0
    byes = Counter(
        p.prop_team_id
        for round_data in result.store.all_rounds()
        for p in round_data.pairings
        if p.is_bye
    )
    assert sum(byes.values()) == 4
    assert max(byes.values()) == 1


def test_standings_account_for_every_debate():
    result = _run(num_teams=10, num_rounds=4, seed=3)

    rows = result.standings
    assert len(rows) == 10
    assert sum(row.wins for row in rows) == sum(row.losses for row in rows) == 20
    assert [row.rank for row in rows] == sorted(row.rank for row in rows)
    assert rows[0].rank == 1


def test_same_seed_gives_same_tournament():
    first = _run(num_teams=8, seed=21)
    second = _run(num_teams=8, seed=21)

    assert [r.team_name for r in first.standings] == [
        r.team_name for r in second.standings
    ]
    assert first.flag_counts() == second.flag_counts()


def test_withdrawn_teams_are_not_drawn_again():
    result = _run(num_teams=12, num_rounds=4, withdrawal_rate=0.2, seed=5)
    store = result.store

    assert result.hard_violations == 0
    assert len(store.active_teams) >= 2
    last_round = store.get_round(4)
    drawn = {t for p in last_round.pairings for t in p.team_ids}
    assert drawn == {team.id for team in store.active_teams}


def test_judge_shortage_is_flagged_not_fatal():
    result = _run(num_teams=8, num_judges=2, seed=9)

    assert result.hard_violations == 0
    assert result.flag_counts()["judge_double_booked"] > 0


def test_every_judge_pool_has_an_independent():
    config = SimulatorConfig(
        num_teams=4, num_rounds=1, num_judges=3, independent_rate=0
    )

    judges = JudgeFactory(config, random.Random(1)).create_judges(["a", "b"])

    assert sum(1 for judge in judges if judge.is_independent) == 1
    assert all(0 <= judge.rating <= 10 for judge in judges)


def test_win_probability_by_pattern():
    def probability(pattern):
        config = SimulatorConfig(num_teams=4, num_rounds=1, result_pattern=pattern)
        return ResultSimulator(config, random.Random(0)).prop_win_probability(0.9, 0.1)

    assert probability(ResultPattern.RANDOM) == 0.5
    assert probability(ResultPattern.PREDICTABLE) == 0.98
    assert probability(ResultPattern.UPSET_FRIENDLY) == pytest.approx(0.8)
    assert probability(ResultPattern.REALISTIC) == 0.95


def test_export_is_a_loadable_save_file():
    result = _run(num_teams=6, num_rounds=2)

    data = json.loads(export_json_format(result))

    assert data["simulation"]["rounds"] == 2
    assert set(data["validation"]) == {"1", "2"}
    assert len(data["teams"]) == 6


def test_preset_simulations():
    standard = create_standard_simulation(seed=2)
    large = create_large_simulation()

    assert (standard.config.num_teams, standard.config.num_rounds) == (24, 5)
    assert (large.config.num_teams, large.config.num_rounds) == (64, 7)
    assert standard.run().hard_violations == 0
