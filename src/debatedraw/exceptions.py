"""Exceptions for use in Debate Draw"""

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


# ========== Base Application Exception ==========


class DebateDrawException(Exception):
    """Base exception for all Debate Draw errors.

    All custom exceptions in the engine inherit from this class, so a host
    application can translate every engine failure with a single except clause.
    """

    pass


# ========== Draw Exceptions ==========


class DrawException(DebateDrawException):
    """Base exception for draw generation errors."""

    pass


class InsufficientTeamsException(DrawException):
    """Raised when fewer than two eligible teams exist for a draw."""

    pass


class InvalidPairingException(DrawException):
    """Raised when a pairing configuration is invalid (e.g. a team against itself)."""

    pass


# ========== Round Exceptions ==========


class RoundException(DebateDrawException):
    """Base exception for round lifecycle errors."""

    pass


class RoundPublishedException(RoundException):
    """Raised when mutating a round whose draw is already published."""

    pass


class RoundNotFoundException(RoundException):
    """Raised when a requested round does not exist."""

    pass


class DuplicateRoundException(RoundException):
    """Raised when creating a round number that already exists."""

    pass


class RoundNotReadyException(RoundException):
    """Raised when publishing a round whose pairings lack judges or a chair."""

    pass


# ========== Allocation Exceptions ==========


class AllocationException(DebateDrawException):
    """Base exception for judge allocation errors."""

    pass


class NoJudgesException(AllocationException):
    """Raised when no judges are registered for the tournament."""

    pass


class NoPairingsException(AllocationException):
    """Raised when allocating judges to a round that has no pairings yet."""

    pass


class NoEligibleJudgeException(AllocationException):
    """Raised when every registered judge is conflicted for some pairing."""

    pass


class HardConflictException(AllocationException):
    """Raised when a judge shares an institution with a competing team."""

    pass


class DuplicateAssignmentException(AllocationException):
    """Raised when a judge is already assigned to the pairing."""

    pass


class AssignmentNotFoundException(AllocationException):
    """Raised when removing or promoting a judge not on the pairing."""

    pass


# ========== Result Exceptions ==========


class ResultException(DebateDrawException):
    """Base exception for result aggregation errors."""

    pass


class NoBallotsException(ResultException):
    """Raised when no submitted ballots exist for a pairing."""

    pass


class ManualResolutionRequired(ResultException):
    """Raised when panel votes and average scores are both tied."""

    pass


class ResultLockedException(ResultException):
    """Raised when modifying a result that has been locked as final."""

    pass


class InvalidResultException(ResultException):
    """Raised when a result is invalid (e.g., winner not in the pairing)."""

    pass


class ResultNotFoundException(ResultException):
    """Raised when a requested result does not exist."""

    pass


# ========== Entity Exceptions ==========


class TeamNotFoundException(DebateDrawException):
    """Raised when a requested team cannot be found."""

    pass


class ParticipationNotFoundException(DebateDrawException):
    """Raised when a requested participation cannot be found."""

    pass


# ========== Validation Exceptions ==========


class ValidationException(DebateDrawException):
    """Base exception for validation errors."""

    pass


class RatingValidationException(ValidationException):
    """Raised when a judge rating is outside 0-10."""

    pass


class InvalidParticipationException(ValidationException):
    """Raised when a participation's fields contradict its role."""

    pass


# ========== File/Resource Exceptions ==========


class ResourceException(DebateDrawException):
    """Base exception for resource-related errors."""

    pass


class FileLoadException(ResourceException):
    """Raised when a tournament file cannot be loaded."""

    pass


class FileSaveException(ResourceException):
    """Raised when a tournament file cannot be saved."""

    pass


# ========== Configuration Exceptions ==========


class ConfigurationException(DebateDrawException):
    """Base exception for configuration errors."""

    pass


class InvalidConfigurationException(ConfigurationException):
    """Raised when configuration data is invalid."""

    pass
