"""Power-paired draw generation for debate rounds."""

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

from itertools import combinations
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from debatedraw.constants import DEFAULT_MAX_SWAP_ATTEMPTS, MIN_TEAMS_FOR_DRAW
from debatedraw.exceptions import InsufficientTeamsException, InvalidPairingException
from debatedraw.models import (
    ConstraintFlag,
    DrawnPairing,
    DrawResult,
    FlagKind,
    PairingHistory,
    Round,
    StandingRow,
    Team,
)
from debatedraw.tournament import StandingsCalculator
from debatedraw.utils import setup_logger

logger = setup_logger(__name__)

# A bracket is the list of teams sharing a win count, best ranked first
Bracket = List[Team]

# Two teams to be paired, better ranked first, with the wins of their bracket
Match = Tuple[Team, Team, int]


class DrawGenerator:
    """Produces the pairings of one round.

    Round 1 follows the caller's seed order. Later rounds are power paired:
    teams are ranked by standings, split into brackets of equal wins, odd
    brackets pull up the best team of the bracket below, and adjacent teams
    are paired top-down. A rematch or a same-institution pairing triggers a
    bounded search for a swap partner in the same or the next bracket. A
    rematch left over after that is regrouped with the nearest pairs; when
    nothing helps the pairing is accepted and flagged.
    """

    def __init__(
        self,
        max_swap_attempts: int = DEFAULT_MAX_SWAP_ATTEMPTS,
        avoid_same_institution: bool = True,
        standings_calculator: Optional[StandingsCalculator] = None,
    ) -> None:
        self.max_swap_attempts = max_swap_attempts
        self.avoid_same_institution = avoid_same_institution
        self.standings_calculator = standings_calculator or StandingsCalculator()

    def generate(
        self,
        teams: Sequence[Team],
        round_number: int,
        rounds: Iterable[Round] = (),
        seed_order: Optional[Sequence[str]] = None,
        standings: Optional[List[StandingRow]] = None,
    ) -> DrawResult:
        """Generate the draw for a round.

        Args:
            teams: All teams of the tournament; inactive teams are skipped
            round_number: The 1-based round being drawn
            rounds: Earlier rounds, for history and standings
            seed_order: Team ids in seed order; defaults to the order of ``teams``
            standings: Precomputed standings; computed from ``rounds`` if omitted

        Returns:
            DrawResult with pairings in bracket order and the bye last

        Raises:
            InsufficientTeamsException: If fewer than two teams are eligible
            InvalidPairingException: If a team id appears twice
        """
        eligible = [team for team in teams if team.is_active]
        if len(eligible) < MIN_TEAMS_FOR_DRAW:
            raise InsufficientTeamsException(
                f"At least {MIN_TEAMS_FOR_DRAW} teams are required for a draw, "
                f"found {len(eligible)}"
            )
        if len({team.id for team in eligible}) != len(eligible):
            raise InvalidPairingException("Duplicate team ids in the draw pool")

        earlier_rounds = [r for r in rounds if r.number < round_number]
        history = PairingHistory.from_rounds(earlier_rounds)
        if standings is None:
            standings = self.standings_calculator.compute_standings(
                eligible, earlier_rounds
            )

        ranked, wins = self._rank_teams(eligible, round_number, seed_order, standings)
        logger.info(
            f"Drawing round {round_number} for {len(ranked)} teams "
            f"({'seed order' if not standings else 'power pairing'})"
        )

        bye_team = None
        if len(ranked) % 2 == 1:
            bye_team = self._select_bye_team(ranked, history)
            ranked.remove(bye_team)
            logger.info(f"Round {round_number}: bye to {bye_team.name}")

        brackets = self._create_brackets(ranked, wins)
        pull_ups = self._apply_pull_ups(brackets)

        rank = {team.id: i for i, team in enumerate(ranked)}
        matched: List[Match] = []
        for index, (bracket_wins, bracket) in enumerate(brackets):
            lower = brackets[index + 1][1] if index + 1 < len(brackets) else None
            matched.extend(self._pair_bracket(bracket, lower, bracket_wins, history))
        self._repair_rematches(matched, history, rank)

        drawn = [
            self._allocate_sides(higher, lower, bracket_wins, history, round_number)
            for higher, lower, bracket_wins in matched
        ]

        if bye_team is not None:
            drawn.append(DrawnPairing(bye_team.id, None, bracket=wins[bye_team.id]))

        for pairing in drawn:
            for flag in pairing.flags:
                logger.warning(f"Round {round_number}: {flag.message}")

        return DrawResult(round_number=round_number, drawn=drawn, pull_ups=pull_ups)

    def _rank_teams(
        self,
        teams: List[Team],
        round_number: int,
        seed_order: Optional[Sequence[str]],
        standings: List[StandingRow],
    ) -> Tuple[List[Team], Dict[str, int]]:
        """Order teams for pairing and return their win counts.

        Ranked teams follow the standings; teams without results follow
        them within their bracket in seed order.
        """
        seed_index = {team.id: i for i, team in enumerate(teams)}
        if seed_order:
            position = {team_id: i for i, team_id in enumerate(seed_order)}
            seed_index = {
                team.id: position.get(team.id, len(position) + i)
                for i, team in enumerate(teams)
            }

        wins = {team.id: 0 for team in teams}
        standing_index: Dict[str, int] = {}
        if round_number > 1:
            for i, row in enumerate(standings):
                if row.team_id in wins:
                    wins[row.team_id] = row.wins
                    standing_index[row.team_id] = i

        def rank_key(team: Team) -> tuple:
            if team.id in standing_index:
                return (-wins[team.id], 0, standing_index[team.id])
            return (-wins[team.id], 1, seed_index[team.id])

        return sorted(teams, key=rank_key), wins

    def _select_bye_team(self, ranked: List[Team], history: PairingHistory) -> Team:
        """Lowest-ranked team that has not had a bye yet.

        When every team has had one, the lowest-ranked team among those with
        the fewest byes is chosen.
        """
        fewest = min(history.bye_counts[team.id] for team in ranked)
        for team in reversed(ranked):
            if history.bye_counts[team.id] == fewest:
                return team
        raise AssertionError("no bye candidate in a non-empty pool")

    def _create_brackets(
        self, ranked: List[Team], wins: Dict[str, int]
    ) -> List[Tuple[int, Bracket]]:
        """Group ranked teams into brackets by wins, highest first."""
        brackets: List[Tuple[int, Bracket]] = []
        for team in ranked:
            if brackets and brackets[-1][0] == wins[team.id]:
                brackets[-1][1].append(team)
            else:
                brackets.append((wins[team.id], [team]))
        return brackets

    def _apply_pull_ups(self, brackets: List[Tuple[int, Bracket]]) -> List[str]:
        """Even out odd brackets with the best team of the next non-empty bracket."""
        pull_ups = []
        for index, (_, bracket) in enumerate(brackets):
            if len(bracket) % 2 == 0:
                continue
            for _, lower in brackets[index + 1 :]:
                if lower:
                    pulled = lower.pop(0)
                    bracket.append(pulled)
                    pull_ups.append(pulled.id)
                    break
        # Brackets emptied by pull-ups take no further part
        brackets[:] = [(w, b) for w, b in brackets if b]
        return pull_ups

    def _pair_bracket(
        self,
        bracket: Bracket,
        lower: Optional[Bracket],
        bracket_wins: int,
        history: PairingHistory,
    ) -> List[Match]:
        """Pair a bracket top-down, adjacent teams first."""
        remaining = list(bracket)
        matched = []
        while len(remaining) >= 2:
            first = remaining.pop(0)
            partner = self._take_partner(first, remaining, lower, history)
            matched.append((first, partner, bracket_wins))
        if remaining:
            # Pull-ups keep brackets even, so a leftover means an inconsistent pool
            raise InvalidPairingException(
                f"Bracket of {bracket_wins} wins left {remaining[0].name} unpaired"
            )
        return matched

    def _repair_rematches(
        self, matched: List[Match], history: PairingHistory, rank: Dict[str, int]
    ) -> None:
        """Re-pair rematches together with nearby pairs, in place.

        A rematch is regrouped with one, then two, of the
        ``max_swap_attempts`` nearest pairs: A-B plus C-D can become A-C plus
        B-D or A-D plus B-C. A regrouping is taken only when it holds no
        rematch at all; among those, the one with the fewest institution
        clashes wins. Regrouped pairs keep the slots, and so the brackets, of
        the pairs they replace.
        """
        for index in range(len(matched)):
            higher, lower, _ = matched[index]
            if not history.have_met(higher.id, lower.id):
                continue
            nearest = sorted(
                (i for i in range(len(matched)) if i != index),
                key=lambda i: (abs(i - index), i > index),
            )[: self.max_swap_attempts]
            groups = [
                sorted((index,) + others)
                for size in (1, 2)
                for others in combinations(nearest, size)
            ]
            for slots in groups:
                regrouped = self._best_regrouping(
                    [matched[i] for i in slots], history, rank
                )
                if regrouped is None:
                    continue
                logger.info(
                    f"Regrouped {len(slots)} pairings to avoid a rematch "
                    f"between {higher.name} and {lower.name}"
                )
                for slot, (first, second) in zip(slots, regrouped):
                    matched[slot] = (first, second, matched[slot][2])
                break

    def _best_regrouping(
        self, group: List[Match], history: PairingHistory, rank: Dict[str, int]
    ) -> Optional[List[Tuple[Team, Team]]]:
        teams = sorted(
            [team for match in group for team in match[:2]],
            key=lambda team: rank[team.id],
        )
        best = None
        best_clashes = None
        for pairs in self._matchings(teams):
            if any(history.have_met(a.id, b.id) for a, b in pairs):
                continue
            clashes = sum(
                1
                for a, b in pairs
                if self.avoid_same_institution and a.shares_institution(b)
            )
            if best is None or clashes < best_clashes:
                best, best_clashes = pairs, clashes
        return best

    @classmethod
    def _matchings(cls, teams: List[Team]) -> Iterable[List[Tuple[Team, Team]]]:
        """Every way to split ``teams`` into pairs, each pair in team order."""
        if not teams:
            yield []
            return
        first, rest = teams[0], teams[1:]
        for index, partner in enumerate(rest):
            for pairs in cls._matchings(rest[:index] + rest[index + 1 :]):
                yield [(first, partner)] + pairs

    def _take_partner(
        self,
        team: Team,
        remaining: Bracket,
        lower: Optional[Bracket],
        history: PairingHistory,
    ) -> Team:
        """Remove and return the opponent for ``team``.

        The adjacent team is preferred. Otherwise up to ``max_swap_attempts``
        further teams of the bracket, then of the bracket below, are tried:
        first for a pairing with no conflict at all, then for one that is at
        least not a rematch. A team swapped up from the bracket below is
        replaced there by the adjacent team it displaced.
        """
        window = remaining[: 1 + self.max_swap_attempts]
        lower_window = lower[: self.max_swap_attempts] if lower else []

        checks = [self._is_clean]
        if self.avoid_same_institution:
            checks.append(lambda a, b, h: not h.have_met(a.id, b.id))

        for acceptable in checks:
            for candidate in window:
                if acceptable(team, candidate, history):
                    remaining.remove(candidate)
                    return candidate
            for candidate in lower_window:
                if acceptable(team, candidate, history):
                    displaced = remaining.pop(0)
                    lower.remove(candidate)
                    lower.insert(0, displaced)
                    logger.info(
                        f"Swapped {candidate.name} up for {displaced.name} "
                        f"to avoid a conflict with {team.name}"
                    )
                    return candidate

        return remaining.pop(0)

    def _is_clean(self, team: Team, other: Team, history: PairingHistory) -> bool:
        if history.have_met(team.id, other.id):
            return False
        if self.avoid_same_institution and team.shares_institution(other):
            return False
        return True

    def _allocate_sides(
        self,
        higher: Team,
        lower: Team,
        bracket_wins: int,
        history: PairingHistory,
        round_number: int,
    ) -> DrawnPairing:
        """Give proposition to the team that has argued it less.

        Equal balances alternate by round: the higher-ranked team opens on
        proposition in odd rounds and on opposition in even rounds.
        """
        higher_balance = history.side_balance(higher.id)
        lower_balance = history.side_balance(lower.id)
        if higher_balance < lower_balance:
            prop, opp = higher, lower
        elif lower_balance < higher_balance:
            prop, opp = lower, higher
        elif round_number % 2 == 1:
            prop, opp = higher, lower
        else:
            prop, opp = lower, higher

        flags = []
        if history.have_met(prop.id, opp.id):
            flags.append(ConstraintFlag(FlagKind.REMATCH, (prop.id, opp.id)))
        if self.avoid_same_institution and prop.shares_institution(opp):
            flags.append(
                ConstraintFlag(FlagKind.INSTITUTION_CLASH, (prop.id, opp.id))
            )
        return DrawnPairing(prop.id, opp.id, bracket=bracket_wins, flags=flags)
