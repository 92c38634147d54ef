"""Debate Draw - draw, judge allocation and standings engine for debate tournaments."""

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

from debatedraw.allocation import JudgeAllocator
from debatedraw.controllers import RoundManager
from debatedraw.pairing import DrawGenerator
from debatedraw.results import ResultAggregator
from debatedraw.storage import TournamentStore
from debatedraw.tournament import StandingsCalculator
from debatedraw.validation import DrawChecker

__version__ = "0.1.0"

__all__ = [
    "DrawChecker",
    "DrawGenerator",
    "JudgeAllocator",
    "ResultAggregator",
    "RoundManager",
    "StandingsCalculator",
    "TournamentStore",
]
