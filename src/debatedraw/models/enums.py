"""Closed enumerations shared by the engine."""

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

from enum import Enum


class Role(Enum):
    """Role of a person within a tournament."""

    DEBATER = "DEBATER"
    JUDGE = "JUDGE"


class Side(Enum):
    """Side a team argues in a pairing."""

    PROP = "PROP"
    OPP = "OPP"


class DrawStatus(Enum):
    """Publication status of a round's draw."""

    DRAFT = "DRAFT"
    PUBLISHED = "PUBLISHED"


class BallotStatus(Enum):
    """Lifecycle of a single judge's ballot."""

    DRAFT = "DRAFT"
    SUBMITTED = "SUBMITTED"
    CONFIRMED = "CONFIRMED"

    @property
    def counts(self) -> bool:
        """Whether the ballot contributes to the aggregated result."""
        return self in (BallotStatus.SUBMITTED, BallotStatus.CONFIRMED)


class FlagKind(Enum):
    """Soft-constraint violations surfaced to the administrator."""

    REMATCH = "rematch"
    INSTITUTION_CLASH = "institution_clash"
    JUDGE_DOUBLE_BOOKED = "judge_double_booked"
