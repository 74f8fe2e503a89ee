"""Inline ``#issue`` and ``@file`` suggestions."""

from ideae.suggestions.engine import (
    BODY_FIELD,
    TITLE_FIELD,
    Idle,
    Pending,
    Showing,
    Suggestion,
    SuggestionEngine,
    SuggestionKind,
    SuggestionState,
)
from ideae.suggestions.files import FileLister, GitFileLister

__all__ = [
    "BODY_FIELD",
    "FileLister",
    "GitFileLister",
    "Idle",
    "Pending",
    "Showing",
    "Suggestion",
    "SuggestionEngine",
    "SuggestionKind",
    "SuggestionState",
    "TITLE_FIELD",
]
