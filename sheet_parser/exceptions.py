"""
Error kinds raised by the sheet parsing engine

Structural failures are terminal for the table being built: the engine
reports which precondition was violated instead of guessing a shape.
"""

from typing import Iterable, Optional


class SheetParserError(Exception):
    """Base class for all sheet parser failures"""


class SourceDecodeError(SheetParserError):
    """Input is neither a valid JSON table nor parseable delimited text"""

    def __init__(self, reason: str = "source not decodable"):
        self.reason = reason
        super().__init__(reason)


# Short alias used by callers that think of decoding as parsing
ParseError = SourceDecodeError


class RequiredColumnNotFound(SheetParserError):
    """A mandatory anchor column (e.g. "Team") is absent"""

    def __init__(self, label: str, context: Optional[str] = None):
        self.label = label
        self.context = context
        message = f"required column not found: {label!r}"
        if context:
            message += f" ({context})"
        super().__init__(message)


class RequiredMarkerNotFound(SheetParserError):
    """A marker row required by a table shape is absent"""

    def __init__(self, phrases: Iterable[str], context: Optional[str] = None):
        self.phrases = tuple(phrases)
        self.context = context
        message = "required marker row not found: " + " + ".join(repr(p) for p in self.phrases)
        if context:
            message += f" ({context})"
        super().__init__(message)


class SectionTooSmall(SheetParserError):
    """A discovered block has fewer columns than the shape requires"""

    def __init__(self, found: int, minimum: int, context: Optional[str] = None):
        self.found = found
        self.minimum = minimum
        self.context = context
        message = f"section too small: {found} columns, at least {minimum} required"
        if context:
            message += f" ({context})"
        super().__init__(message)


class FetchError(SheetParserError):
    """Raw sheet text could not be retrieved"""

    def __init__(self, url: str, status_code: Optional[int] = None, reason: str = ""):
        self.url = url
        self.status_code = status_code
        message = f"fetch failed for {url}"
        if status_code is not None:
            message += f" ({status_code})"
        if reason:
            message += f": {reason}"
        super().__init__(message)
