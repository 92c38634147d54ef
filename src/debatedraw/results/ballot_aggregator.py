"""Aggregation of judges' ballots into a pairing result."""

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

from debatedraw.exceptions import (
    InvalidResultException,
    ManualResolutionRequired,
    NoBallotsException,
    ResultLockedException,
    ResultNotFoundException,
)
from debatedraw.models import Ballot, Pairing, Result, Side
from debatedraw.utils import setup_logger

logger = setup_logger(__name__)


class ResultAggregator:
    """Turns the ballots of a panel into the result of a pairing.

    The side with more panel votes wins. An even split is decided by the
    higher average team total across ballots; if that is level too the
    pairing needs manual resolution. Only submitted and confirmed ballots
    are counted.
    """

    def aggregate(
        self,
        pairing: Pairing,
        ballots: Optional[Sequence[Ballot]] = None,
        finalize: bool = False,
    ) -> Result:
        """Compute and store the result of a pairing.

        Args:
            pairing: The debate being decided
            ballots: Ballots to count, defaults to the ballots on the pairing
            finalize: Lock the result once computed

        Raises:
            InvalidResultException: For a bye or a malformed ballot
            ResultLockedException: If the pairing already has a locked result
            NoBallotsException: If no ballot has been submitted
            ManualResolutionRequired: If votes and average scores are both level
        """
        self._check_decidable(pairing)
        if ballots is None:
            ballots = pairing.ballots
        counted = [ballot for ballot in ballots if ballot.status.counts]
        if not counted:
            raise NoBallotsException(
                f"No submitted ballots for pairing {pairing.id}"
            )
        self._validate_ballots(pairing, counted)

        votes_prop = sum(1 for b in counted if b.winner_team_id == pairing.prop_team_id)
        votes_opp = len(counted) - votes_prop
        prop_avg = self._average_total(counted, pairing.prop_team_id)
        opp_avg = self._average_total(counted, pairing.opp_team_id)

        if votes_prop > votes_opp:
            winning_side = Side.PROP
        elif votes_opp > votes_prop:
            winning_side = Side.OPP
        elif prop_avg is not None and opp_avg is not None and prop_avg != opp_avg:
            winning_side = Side.PROP if prop_avg > opp_avg else Side.OPP
            logger.info(
                f"Pairing {pairing.id}: split panel decided on scores "
                f"({prop_avg:g} vs {opp_avg:g})"
            )
        else:
            raise ManualResolutionRequired(
                f"Pairing {pairing.id} is tied {votes_prop}-{votes_opp} with "
                f"level scores; set the winner manually"
            )

        winner = pairing.team_for_side(winning_side)
        pairing.result = Result(
            winner_team_id=winner,
            loser_team_id=pairing.opponent_of(winner),
            winning_side=winning_side,
            panel_votes_prop=votes_prop,
            panel_votes_opp=votes_opp,
            prop_avg_score=prop_avg,
            opp_avg_score=opp_avg,
        )
        logger.info(
            f"Pairing {pairing.id}: {winning_side.value} wins "
            f"{pairing.result.vote_split}"
        )
        if finalize:
            self.lock(pairing)
        return pairing.result

    def override_winner(
        self, pairing: Pairing, winner_team_id: str, finalize: bool = True
    ) -> Result:
        """Set the winner of a pairing by hand, keeping any vote counts."""
        self._check_decidable(pairing)
        winning_side = pairing.side_of(winner_team_id)
        if winning_side is None:
            raise InvalidResultException(
                f"Team {winner_team_id} did not debate in pairing {pairing.id}"
            )
        previous = pairing.result
        pairing.result = Result(
            winner_team_id=winner_team_id,
            loser_team_id=pairing.opponent_of(winner_team_id),
            winning_side=winning_side,
            panel_votes_prop=previous.panel_votes_prop if previous else 0,
            panel_votes_opp=previous.panel_votes_opp if previous else 0,
            prop_avg_score=previous.prop_avg_score if previous else None,
            opp_avg_score=previous.opp_avg_score if previous else None,
        )
        logger.info(f"Pairing {pairing.id}: winner set to {winner_team_id} by hand")
        if finalize:
            self.lock(pairing)
        return pairing.result

    def lock(self, pairing: Pairing) -> Result:
        if pairing.result is None:
            raise ResultNotFoundException(f"Pairing {pairing.id} has no result")
        if not pairing.result.is_final:
            pairing.result.is_final = True
            pairing.result.finalized_at = datetime.now()
        return pairing.result

    def reopen(self, pairing: Pairing) -> Result:
        if pairing.result is None:
            raise ResultNotFoundException(f"Pairing {pairing.id} has no result")
        pairing.result.is_final = False
        pairing.result.finalized_at = None
        logger.info(f"Pairing {pairing.id}: result reopened")
        return pairing.result

    def _check_decidable(self, pairing: Pairing) -> None:
        if pairing.is_bye:
            raise InvalidResultException(
                f"Pairing {pairing.id} is a bye and takes no result"
            )
        if pairing.result is not None and pairing.result.is_final:
            raise ResultLockedException(
                f"Result of pairing {pairing.id} is locked; reopen it first"
            )

    def _validate_ballots(self, pairing: Pairing, ballots: List[Ballot]) -> None:
        panel = set(pairing.judge_ids)
        judges_seen = set()
        for ballot in ballots:
            if ballot.winner_team_id not in pairing.team_ids:
                raise InvalidResultException(
                    f"Ballot of judge {ballot.judge_id} names {ballot.winner_team_id}, "
                    f"which is not in pairing {pairing.id}"
                )
            if panel and ballot.judge_id not in panel:
                raise InvalidResultException(
                    f"Judge {ballot.judge_id} is not on the panel of pairing {pairing.id}"
                )
            if ballot.judge_id in judges_seen:
                raise InvalidResultException(
                    f"Judge {ballot.judge_id} submitted two ballots for pairing "
                    f"{pairing.id}"
                )
            judges_seen.add(ballot.judge_id)

    @staticmethod
    def _average_total(ballots: List[Ballot], team_id: str) -> Optional[float]:
        totals = [ballot.team_total(team_id) for ballot in ballots]
        totals = [total for total in totals if total is not None]
        if not totals:
            return None
        return sum(totals) / len(totals)
