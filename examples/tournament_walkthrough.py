"""Example script walking through the rounds of a small debate tournament.

It registers teams and judges, draws and allocates each round, records
ballots, and prints the standings, then runs a simulated tournament.
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

import sys
from pathlib import Path

# Add src to path for development
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from debatedraw.controllers import RoundManager
from debatedraw.exceptions import ManualResolutionRequired
from debatedraw.models import Ballot, Participation, Role, Team, TournamentConfig
from debatedraw.storage import TournamentStore
from debatedraw.testing.__main__ import format_standings
from debatedraw.testing.simulator import create_small_simulation


def example_manual_rounds():
    """Example: Driving rounds by hand through the RoundManager."""

    print("\n" + "=" * 70)
    print("EXAMPLE 1: Three rounds by hand")
    print("=" * 70 + "\n")

    store = TournamentStore(TournamentConfig(name="Example Open", num_rounds=3))
    institutions = ["north", "north", "south", "south", "east", "west"]
    for i, institution in enumerate(institutions):
        store.add_team(
            Team(name=f"{institution.title()} {i + 1}", institution_id=institution)
        )
    for i, institution in enumerate(["north", "south", "east", None, None]):
        store.add_participation(
            Participation(
                name=f"Judge {i + 1}",
                role=Role.JUDGE,
                institution_id=institution,
                rating=5.0 + i,
                is_independent=institution is None,
            )
        )

    manager = RoundManager(store)
    for number in range(1, store.config.num_rounds + 1):
        manager.create_round(number, motion=f"This house would adopt motion {number}")
        draw = manager.generate_draw(number)
        manager.allocate_judges(number)
        manager.publish_round(number)

        print(f"Round {number}:")
        for pairing in store.get_round(number).pairings:
            if pairing.is_bye:
                print(f"  {store.get_team(pairing.prop_team_id).name} has the bye")
                continue
            prop = store.get_team(pairing.prop_team_id)
            opp = store.get_team(pairing.opp_team_id)
            chair = store.get_participation(pairing.chair.judge_id)
            print(f"  {prop.name} (prop) vs {opp.name} (opp), chaired by {chair.name}")

            # The proposition team wins every ballot in this example
            for judge_id in pairing.judge_ids:
                manager.submit_ballot(
                    number,
                    pairing.id,
                    Ballot(judge_id, winner_team_id=pairing.prop_team_id),
                )
            try:
                manager.aggregate_result(number, pairing.id, finalize=True)
            except ManualResolutionRequired:
                manager.override_result(number, pairing.id, pairing.prop_team_id)

        for flags in draw.flags:
            for flag in flags:
                print(f"  Warning: {flag.message}")

    print("\nStandings:")
    for line in format_standings(manager.standings()):
        print(f"  {line}")


def example_simulation():
    """Example: Simulating a tournament with the testing tools."""

    print("\n" + "=" * 70)
    print("EXAMPLE 2: Simulated tournament")
    print("=" * 70 + "\n")

    result = create_small_simulation(num_teams=9, seed=7).run()
    for key, value in result.summary().items():
        print(f"  {key}: {value}")


if __name__ == "__main__":
    example_manual_rounds()
    example_simulation()
