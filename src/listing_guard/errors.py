"""Exceptions raised at the engine boundary."""

from __future__ import annotations


class ListingGuardError(Exception):
    """Base class for listing-guard errors."""


class ConfigError(ListingGuardError, ValueError):
    """A RuleSet (or the config it was loaded from) is malformed."""


class InvalidInputError(ListingGuardError, ValueError):
    """Text handed to the engine is not a string or is too long."""
