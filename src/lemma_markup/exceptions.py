"""Custom exception hierarchy for lemma-markup."""

from __future__ import annotations


class LemmaMarkupError(Exception):
    """Base exception for all lemma-markup errors."""


# ---------------------------------------------------------------------------
# Parse errors
# ---------------------------------------------------------------------------

class ParseError(LemmaMarkupError):
    """A notation line could not be parsed."""

    def __init__(
        self,
        message: str,
        text: str | None = None,
        *,
        line_number: int | None = None,
        source: str | None = None,
    ) -> None:
        self.message = message
        self.text = text
        self.line_number = line_number
        self.source = source
        super().__init__(message)


class EmptyInputError(ParseError):
    """Empty or whitespace-only input."""


class MismatchedBracketsError(ParseError):
    """Counts of '[' and ']' differ."""


class MalformedAnnotationError(ParseError):
    """Annotation block not closed by ']'."""


class MissingHeadwordTextError(ParseError):
    """No headword text before the annotations or sub-entries."""


class EmptyAnnotationBlockError(ParseError):
    """Annotation brackets with nothing inside."""


class EmptyAnnotationKeyError(ParseError):
    """Annotation with a blank key."""


class EmptyAnnotationValueError(ParseError):
    """Annotation 'key:' with a blank value."""


class InvalidAnnotationKeyError(ParseError):
    """Annotation key with characters outside [A-Za-z0-9_]."""


class InvalidAnnotationValueError(ParseError):
    """Annotation value containing reserved characters."""


class MalformedRedirectionError(ParseError):
    """Redirection with a missing headword, target or relation type."""


class EmptyRedirectTargetError(ParseError):
    """Redirection whose target is blank."""


class MalformedSubEntryError(ParseError):
    """Blank sub-entry or sub-entry containing reserved characters."""


class CollectionParseError(ParseError):
    """A line of a collection failed to parse."""

    def __init__(
        self,
        cause: ParseError,
        text: str,
        *,
        line_number: int,
        source: str,
    ) -> None:
        self.cause = cause
        super().__init__(
            f"Error on line {line_number} of {source}: {cause.message} ({text})",
            text,
            line_number=line_number,
            source=source,
        )


# ---------------------------------------------------------------------------
# Model errors
# ---------------------------------------------------------------------------

class InvalidRedirectError(LemmaMarkupError):
    """Redirect built with an empty target or relation type."""


class InvalidStateError(LemmaMarkupError):
    """Builder call that would break an entry invariant."""


# ---------------------------------------------------------------------------
# Validation errors
# ---------------------------------------------------------------------------

class ValidationError(LemmaMarkupError):
    """A collection failed structural validation."""

    def __init__(
        self,
        message: str,
        *,
        word: str | None = None,
        locations: tuple[str, ...] = (),
        chain: tuple[str, ...] = (),
    ) -> None:
        self.word = word
        self.locations = locations
        self.chain = chain
        super().__init__(message)


class DuplicateHeadwordError(ValidationError):
    """Same headword on more than one entry."""


class RoleConflictError(ValidationError):
    """One word used in incompatible roles."""


class CircularDependencyError(ValidationError):
    """Headwords that contain each other as sub-entries."""


class CircularRedirectionError(ValidationError):
    """Redirection chain that returns to its start."""


# ---------------------------------------------------------------------------
# Source and configuration errors
# ---------------------------------------------------------------------------

class SourceError(LemmaMarkupError):
    """Reading or writing a notation file failed."""

    def __init__(self, message: str, path: str | None = None) -> None:
        self.path = path
        super().__init__(message)


class SourceNotFoundError(SourceError):
    """File does not exist."""


class SourcePermissionError(SourceError):
    """File cannot be read or written with current permissions."""


class SourceIOError(SourceError):
    """Any other I/O or decoding failure."""


class ConfigError(LemmaMarkupError):
    """Invalid settings file."""

    def __init__(self, message: str, line: int | None = None) -> None:
        self.line = line
        super().__init__(message)
