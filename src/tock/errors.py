#!/usr/bin/env python3
"""
Exception types raised by tock commands and storage.
"""

from __future__ import annotations


class TockError(Exception):
    """
    Base class for failures reported to the user.
    """


class SessionConflictError(TockError):
    """
    Raised when a command conflicts with the active-session state.
    """


class NotFoundError(TockError):
    """
    Raised when a referenced session id does not exist.
    """

    def __init__(self, session_id: int) -> None:
        super().__init__(f"Session with ID {session_id} not found")
        self.session_id = session_id


class ValidationError(TockError, ValueError):
    """
    Raised for invalid user input.
    """


class InvalidDatetimeError(ValidationError):
    """
    Raised when a datetime string does not match the input format.
    """


class AmbiguousTimeError(ValidationError):
    """
    Raised when a local wall-clock time is ambiguous or does not exist.
    """


class StorageError(TockError):
    """
    Raised when the session database cannot be read or written.
    """


class ConfigError(TockError):
    """
    Raised when the configuration file or one of its values is invalid.
    """
