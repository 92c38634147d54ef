"""Core data models for the draw, allocation and standings engine."""

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

from debatedraw.models.allocation_result import AllocationResult
from debatedraw.models.draw_result import ConstraintFlag, DrawnPairing, DrawResult
from debatedraw.models.enums import BallotStatus, DrawStatus, FlagKind, Role, Side
from debatedraw.models.pairing_history import PairingHistory
from debatedraw.models.participation import Participation
from debatedraw.models.result import Ballot, Result, SpeakerScore
from debatedraw.models.round import JudgeAssignment, Pairing, Round
from debatedraw.models.standing import StandingRow
from debatedraw.models.team import Team
from debatedraw.models.tournament_config import TournamentConfig

__all__ = [
    "AllocationResult",
    "Ballot",
    "BallotStatus",
    "ConstraintFlag",
    "DrawnPairing",
    "DrawResult",
    "DrawStatus",
    "FlagKind",
    "JudgeAssignment",
    "Pairing",
    "PairingHistory",
    "Participation",
    "Result",
    "Role",
    "Round",
    "Side",
    "SpeakerScore",
    "StandingRow",
    "Team",
    "TournamentConfig",
]
