"""Standings calculation for debate tournaments.

This module derives win/loss records and the Buchholz opponent-strength
tiebreak from finalized results.
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

from typing import Dict, Iterable, List, Optional

from debatedraw.models import Pairing, Round, Side, StandingRow, Team
from debatedraw.utils import setup_logger

logger = setup_logger(__name__)

# Opponent strength is compared at this precision when sorting and detecting ties
_STRENGTH_PRECISION = 9


class StandingsCalculator:
    """Calculates ranked standings for a tournament.

    Standings are a pure function of the teams and the rounds passed in:
    - wins and losses count only pairings with a finalized winner
    - opponent strength (Buchholz) is the mean of the wins of every opponent
      faced, read from a wins map built before any strength is computed
    - byes count neither as a debate nor towards opponent strength
    - teams without a finalized debate are left out entirely

    Rows are ordered by wins, then opponent strength. Rows still equal after
    that share a rank and are marked as tied; no further tiebreak is applied.
    """

    def compute_standings(
        self, teams: Iterable[Team], rounds: Iterable[Round]
    ) -> List[StandingRow]:
        """Compute ranked standings.

        Args:
            teams: Teams of the tournament, in a stable order
            rounds: All rounds whose results should be counted

        Returns:
            Ranked standings rows, empty if no debate has a finalized result
        """
        teams = list(teams)
        finalized = self.finalized_pairings(rounds)
        if not finalized:
            return []

        # First pass: wins map over every team seen in a finalized debate
        wins_map: Dict[str, int] = {}
        for pairing in finalized:
            for team_id in pairing.team_ids:
                wins_map.setdefault(team_id, 0)
            wins_map[pairing.result.winner_team_id] += 1

        rows: List[StandingRow] = []
        for team in teams:
            if team.id not in wins_map:
                # Hasn't played yet
                continue
            rows.append(self._build_row(team, finalized, wins_map))

        rows.sort(key=self._sort_key)
        self._assign_ranks(rows)

        logger.info(
            f"Computed standings for {len(rows)} teams from {len(finalized)} results"
        )
        return rows

    def finalized_pairings(self, rounds: Iterable[Round]) -> List[Pairing]:
        """Debates with a decided winner, in round order."""
        finalized = []
        for round_data in sorted(rounds, key=lambda r: r.number):
            for pairing in round_data.pairings:
                if pairing.is_bye or pairing.result is None:
                    continue
                if pairing.result.winner_team_id not in pairing.team_ids:
                    logger.warning(
                        f"Ignoring result of pairing {pairing.id}: winner "
                        f"{pairing.result.winner_team_id} did not debate in it"
                    )
                    continue
                finalized.append(pairing)
        return finalized

    def _build_row(
        self, team: Team, finalized: List[Pairing], wins_map: Dict[str, int]
    ) -> StandingRow:
        row = StandingRow(team_id=team.id, team_name=team.name)
        opponent_wins: List[int] = []

        for pairing in finalized:
            side = pairing.side_of(team.id)
            if side is None:
                continue
            if side is Side.PROP:
                row.prop_count += 1
            else:
                row.opp_count += 1
            if pairing.result.winner_team_id == team.id:
                row.wins += 1
            else:
                row.losses += 1
            opponent_wins.append(wins_map.get(pairing.opponent_of(team.id), 0))

        if opponent_wins:
            row.opponent_strength = sum(opponent_wins) / len(opponent_wins)
        return row

    @staticmethod
    def _sort_key(row: StandingRow) -> tuple:
        return (-row.wins, -round(row.opponent_strength, _STRENGTH_PRECISION))

    def _assign_ranks(self, rows: List[StandingRow]) -> None:
        """Competition ranking: tied rows share a rank, the next rank skips."""
        previous_key = None
        for position, row in enumerate(rows, start=1):
            key = self._sort_key(row)
            if key == previous_key:
                row.rank = rows[position - 2].rank
                row.is_tied = True
                rows[position - 2].is_tied = True
            else:
                row.rank = position
            previous_key = key

    def head_to_head(
        self, team1_id: str, team2_id: str, rounds: Iterable[Round]
    ) -> Optional[str]:
        """Winner of the most recent finalized debate between two teams.

        Offered to display layers that want to annotate a tie; it is never
        applied to the ordering.

        Returns:
            Winning team id, or None if the teams have not met
        """
        winner = None
        for pairing in self.finalized_pairings(rounds):
            if pairing.involves(team1_id) and pairing.involves(team2_id):
                winner = pairing.result.winner_team_id
        return winner
