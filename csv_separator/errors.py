"""
Failures raised by the separator detector.

Every error carries the file path and a human-readable cause. ``kind`` is a
stable code the HTTP layer reports back to clients.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Union


class SeparatorError(Exception):
    kind = "separator_error"

    def __init__(self, path: Optional[Union[str, Path]], cause: str):
        self.path = str(path) if path is not None else None
        self.cause = cause
        super().__init__(f"{cause}: {self.path}" if self.path else cause)


class ConfigurationError(SeparatorError):
    """No candidates left after applying exclude/include."""

    kind = "configuration"


class MissingFileError(SeparatorError, FileNotFoundError):
    """The path does not exist. Also caught by ``except FileNotFoundError``."""

    kind = "file_not_found"


class FileOpenError(SeparatorError):
    """The path exists but could not be opened or read."""

    kind = "file_open"


class NoCandidatesSurviveError(SeparatorError):
    kind = "no_candidates"


class AmbiguousLuckyError(SeparatorError):
    """Lucky mode reached end of file with more than one survivor."""

    kind = "ambiguous_lucky"


class InsufficientDataError(SeparatorError):
    """Too few records to rank the survivors by variability."""

    kind = "insufficient_data"
