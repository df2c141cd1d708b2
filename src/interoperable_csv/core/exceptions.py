"""
Exceptions raised by the iCSV format engine.
"""

from typing import Optional


class FormatError(ValueError):
    """Raised when a file or in-memory object violates the iCSV format."""

    def __init__(
        self,
        message: str,
        source: Optional[str] = None,
        line: Optional[str] = None
    ):
        self.source = source
        self.line = line
        context = ""
        if line is not None:
            context += f". Offending line: {line!r}"
        if source is not None:
            context += f" (file: {source})"
        super().__init__(f"{message}{context}")
