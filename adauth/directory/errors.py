from __future__ import annotations


class DirectoryError(Exception):
    """Base class for directory client errors."""


class DirectoryConfigurationError(DirectoryError):
    """A query was issued against the wrong endpoint or with a bad parameter."""
