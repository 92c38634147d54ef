"""Pairing history used to avoid rematches and repeat byes."""

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
from typing import Dict, Iterable, Set

from debatedraw.models.round import Round


@dataclass
class PairingHistory:
    """
    Tracks historical pairings to prevent rematches.

    Attributes
    ----------
    previous_matches : set of frozenset of str
        Team id pairs that have already met.
    bye_counts : Counter
        Number of byes each team has received.
    side_counts : dict of str to list of int
        ``[prop, opp]`` appearances per team, byes excluded.
    """

    previous_matches: Set[frozenset] = field(default_factory=set)
    bye_counts: Counter = field(default_factory=Counter)
    side_counts: Dict[str, list] = field(default_factory=dict)

    @classmethod
    def from_rounds(cls, rounds: Iterable[Round]) -> "PairingHistory":
        """Build history from the pairings of the given rounds, byes included."""
        history = cls()
        for round_data in rounds:
            for pairing in round_data.pairings:
                if pairing.is_bye:
                    for team_id in pairing.team_ids:
                        history.add_bye(team_id)
                else:
                    history.add_pairing(pairing.prop_team_id, pairing.opp_team_id)
        return history

    def add_pairing(self, prop_team_id: str, opp_team_id: str) -> None:
        """Record that two teams have met, proposition first."""
        self.previous_matches.add(frozenset({prop_team_id, opp_team_id}))
        self.side_counts.setdefault(prop_team_id, [0, 0])[0] += 1
        self.side_counts.setdefault(opp_team_id, [0, 0])[1] += 1

    def add_bye(self, team_id: str) -> None:
        self.bye_counts[team_id] += 1

    def have_met(self, team1_id: str, team2_id: str) -> bool:
        """Check if two teams have previously met."""
        return frozenset({team1_id, team2_id}) in self.previous_matches

    def side_balance(self, team_id: str) -> int:
        """Proposition appearances minus opposition appearances."""
        prop, opp = self.side_counts.get(team_id, [0, 0])
        return prop - opp
