"""Shared utilities for Debate Draw."""

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

import logging
import os
import uuid

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
_LOG_LEVEL_ENV = "DEBATEDRAW_LOG_LEVEL"


def setup_logger(name: str) -> logging.Logger:
    """Return a module logger sharing the package handler.

    The level defaults to WARNING and can be raised or lowered with the
    ``DEBATEDRAW_LOG_LEVEL`` environment variable.
    """
    root = logging.getLogger("debatedraw")
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)
        level = os.environ.get(_LOG_LEVEL_ENV, "WARNING").upper()
        root.setLevel(getattr(logging, level, logging.WARNING))
    return logging.getLogger(name)


def generate_id(prefix: str) -> str:
    """Generate a unique identifier with a readable prefix."""
    return f"{prefix.lower()}_{uuid.uuid4().hex[:12]}"
