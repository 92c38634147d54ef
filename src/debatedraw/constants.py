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

# --- Constants ---
SAVE_FILE_EXTENSION = ".json"

# Draw constraints
MIN_TEAMS_FOR_DRAW = 2
DEFAULT_MAX_SWAP_ATTEMPTS = 3  # Candidates tried before a rematch is accepted

# Judge ratings
MIN_JUDGE_RATING = 0.0
MAX_JUDGE_RATING = 10.0
DEFAULT_JUDGE_RATING = 5.0

# Judge allocation strategies
ALLOC_ROUND_ROBIN = "round_robin"
ALLOC_WEIGHTED = "weighted"
ALLOCATION_STRATEGIES = (ALLOC_ROUND_ROBIN, ALLOC_WEIGHTED)
DEFAULT_ALLOCATION_STRATEGY = ALLOC_ROUND_ROBIN

# Weighted allocation cost model
DEFAULT_CONFLICT_PENALTY = 1000.0
DEFAULT_STRENGTH_MISMATCH_PENALTY = 10.0
LOAD_PENALTY = 2.0
ROUND_IMPORTANCE_FACTOR = 2.0
BRACKET_IMPORTANCE_FACTOR = 3.0

# Flag messages shown to administrators
FLAG_MESSAGES = {
    "rematch": "Teams have met before in this tournament",
    "institution_clash": "Teams belong to the same institution",
    "judge_double_booked": "Judge sits on more than one pairing this round",
}
