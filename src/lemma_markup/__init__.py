"""lemma-markup: parser, data model and validator for lemma markup files."""

__version__ = "0.1.0"

from .exceptions import (
    LemmaMarkupError as LemmaMarkupError,
    ParseError as ParseError,
    EmptyInputError as EmptyInputError,
    MismatchedBracketsError as MismatchedBracketsError,
    MalformedAnnotationError as MalformedAnnotationError,
    MissingHeadwordTextError as MissingHeadwordTextError,
    EmptyAnnotationBlockError as EmptyAnnotationBlockError,
    EmptyAnnotationKeyError as EmptyAnnotationKeyError,
    EmptyAnnotationValueError as EmptyAnnotationValueError,
    InvalidAnnotationKeyError as InvalidAnnotationKeyError,
    InvalidAnnotationValueError as InvalidAnnotationValueError,
    MalformedRedirectionError as MalformedRedirectionError,
    EmptyRedirectTargetError as EmptyRedirectTargetError,
    MalformedSubEntryError as MalformedSubEntryError,
    CollectionParseError as CollectionParseError,
    InvalidRedirectError as InvalidRedirectError,
    InvalidStateError as InvalidStateError,
    ValidationError as ValidationError,
    DuplicateHeadwordError as DuplicateHeadwordError,
    RoleConflictError as RoleConflictError,
    CircularDependencyError as CircularDependencyError,
    CircularRedirectionError as CircularRedirectionError,
    SourceError as SourceError,
    SourceNotFoundError as SourceNotFoundError,
    SourcePermissionError as SourcePermissionError,
    SourceIOError as SourceIOError,
    ConfigError as ConfigError,
)

from .models import (
    EntryKind as EntryKind,
    Redirect as Redirect,
    SubEntry as SubEntry,
    Entry as Entry,
    ValidationIssue as ValidationIssue,
)

from .parser import (
    parse_entry as parse_entry,
    smart_split as smart_split,
)

from .collection import (
    EntryCollection as EntryCollection,
)

from .config import (
    Settings as Settings,
    load_settings as load_settings,
)

__all__ = [
    # Models
    "EntryKind",
    "Redirect",
    "SubEntry",
    "Entry",
    "ValidationIssue",
    "EntryCollection",
    # Functions
    "parse_entry",
    "smart_split",
    "load_settings",
    "Settings",
    # Exceptions
    "LemmaMarkupError",
    "ParseError",
    "EmptyInputError",
    "MismatchedBracketsError",
    "MalformedAnnotationError",
    "MissingHeadwordTextError",
    "EmptyAnnotationBlockError",
    "EmptyAnnotationKeyError",
    "EmptyAnnotationValueError",
    "InvalidAnnotationKeyError",
    "InvalidAnnotationValueError",
    "MalformedRedirectionError",
    "EmptyRedirectTargetError",
    "MalformedSubEntryError",
    "CollectionParseError",
    "InvalidRedirectError",
    "InvalidStateError",
    "ValidationError",
    "DuplicateHeadwordError",
    "RoleConflictError",
    "CircularDependencyError",
    "CircularRedirectionError",
    "SourceError",
    "SourceNotFoundError",
    "SourcePermissionError",
    "SourceIOError",
    "ConfigError",
]
