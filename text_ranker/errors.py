from __future__ import annotations


class TextRankError(Exception):
    """Base class for errors raised by text_ranker."""


class EmptyInputError(TextRankError, ValueError):
    """No relevant units or sentences were supplied."""


class InvalidConfigurationError(TextRankError, ValueError):
    """An option is outside its valid range."""


class DidNotConverge(UserWarning):
    """The solver stopped on its iteration cap or timeout before converging."""


class InvalidInputError(TextRankError, ValueError):
    """Input tables are inconsistent (duplicate or unknown ids)."""
