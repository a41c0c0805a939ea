"""Domain model for lemma-markup: redirects, sub-entries and entries."""

from __future__ import annotations

import weakref
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from lemma_markup import notation
from lemma_markup.exceptions import (
    InvalidAnnotationValueError,
    InvalidRedirectError,
    InvalidStateError,
    MissingHeadwordTextError,
)

AnnotationValue = str | bool

# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class EntryKind(str, Enum):
    """Whether an entry carries content or points elsewhere."""

    NORMAL = "normal"
    REDIRECT = "redirect"


# ---------------------------------------------------------------------------
# Dataclasses
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Redirect:
    """A pointer to another headword, tagged with relation types."""

    target: str
    types: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        target = (self.target or "").strip()
        if not target:
            raise InvalidRedirectError("Redirect target cannot be empty")
        raw_types = (self.types,) if isinstance(self.types, str) else self.types
        types = tuple(t.strip() for t in raw_types or ())
        if not all(types):
            raise InvalidRedirectError(
                f"Relation type cannot be empty (redirect to '{target}')"
            )
        object.__setattr__(self, "target", target)
        object.__setattr__(self, "types", types)

    def has_type(self, relation_type: str) -> bool:
        return relation_type in self.types

    def to_string(self) -> str:
        if not self.types:
            return f"{notation.REDIRECT_MARKER}{self.target}"
        return f"{notation.REDIRECT_MARKER}({','.join(self.types)}){self.target}"

    def __str__(self) -> str:
        return self.to_string()


@dataclass
class SubEntry:
    """A related word under an entry, a redirect, or a word with a redirect.

    The owning entry is held through a weak reference, so a detached
    sub-entry never keeps its former parent alive.
    """

    text: str | None = None
    redirect: Redirect | None = None
    source_file: str | None = field(default=None, compare=False)
    source_line: int | None = field(default=None, compare=False)
    source_column: int | None = field(default=None, compare=False)
    _parent_ref: weakref.ReferenceType[Entry] | None = field(
        default=None, init=False, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        if self.text is not None:
            self.text = self.text.strip()
            if not self.text:
                raise InvalidStateError("Sub-entry text cannot be empty")
        if self.text is None and self.redirect is None:
            raise InvalidStateError("Sub-entry needs text or a redirect")

    @property
    def parent(self) -> Entry | None:
        if self._parent_ref is None:
            return None
        return self._parent_ref()

    @parent.setter
    def parent(self, entry: Entry | None) -> None:
        self._parent_ref = weakref.ref(entry) if entry is not None else None

    @property
    def is_redirect(self) -> bool:
        """True for a pure redirect (no text of its own)."""
        return self.text is None and self.redirect is not None

    def shortcut(self, placeholder: str = "~") -> str | None:
        """Render the text with the parent's headword replaced by ``placeholder``.

        ``"work out"`` under ``"work"`` gives ``"~ out"``; ``"work"`` gives
        ``"~"``; ``"workout"`` is returned unchanged. Returns ``None`` for
        pure redirects and for sub-entries without a named parent.
        """
        if self.is_redirect or self.text is None:
            return None
        parent = self.parent
        if parent is None or not parent.headword:
            return None
        headword = parent.headword
        if self.text == headword:
            return placeholder
        if self.text.startswith(headword):
            remainder = self.text[len(headword):]
            if remainder[0].isspace():
                return placeholder + remainder
        return self.text

    def to_string(self) -> str:
        if self.text is None:
            return self.redirect.to_string() if self.redirect else ""
        if self.redirect is not None:
            return self.text + self.redirect.to_string()
        return self.text

    def __str__(self) -> str:
        return self.to_string()


@dataclass(frozen=True, slots=True)
class ValidationIssue:
    """A single structural problem found in a collection."""

    rule_id: str
    word: str
    message: str
    locations: tuple[str, ...] = ()
    chain: tuple[str, ...] = ()
    severity: str = "ERROR"


# ---------------------------------------------------------------------------
# Entry
# ---------------------------------------------------------------------------

class Entry:
    """A headword with annotations and sub-entries, or a redirection.

    A redirect never coexists with sub-entries or annotations; every
    builder method below refuses calls that would mix them.
    """

    def __init__(
        self,
        headword: str | None = None,
        *,
        source_file: str | None = None,
        source_line: int | None = None,
        source_column: int | None = None,
    ) -> None:
        self.headword: str | None = None
        self.annotations: dict[str, AnnotationValue] = {}
        self.sub_entries: list[SubEntry] = []
        self.redirect: Redirect | None = None
        self.source_file = source_file
        self.source_line = source_line
        self.source_column = source_column
        if headword is not None:
            self.set_headword(headword)

    @classmethod
    def parse(
        cls,
        line: str,
        *,
        source: str | None = None,
        line_number: int | None = None,
    ) -> Entry:
        """Parse one notation line."""
        from lemma_markup.parser import parse_entry

        return parse_entry(line, source=source, line_number=line_number)

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def is_redirect(self) -> bool:
        return self.redirect is not None and not self.sub_entries

    @property
    def kind(self) -> EntryKind:
        return EntryKind.REDIRECT if self.is_redirect else EntryKind.NORMAL

    def _require_not_redirect(self, message: str) -> None:
        if self.is_redirect:
            raise InvalidStateError(f"{message} ('{self.headword}')")

    # ------------------------------------------------------------------
    # Builder API
    # ------------------------------------------------------------------

    def set_headword(self, text: str) -> Entry:
        headword = (text or "").strip()
        if not headword:
            raise MissingHeadwordTextError("Headword cannot be empty", text)
        reserved = [
            c for c in (
                notation.ANNOTATION_OPEN,
                notation.ANNOTATION_CLOSE,
                notation.SUB_ENTRY_SEPARATOR,
                notation.REDIRECT_MARKER,
            )
            if c in headword
        ]
        if reserved or headword.startswith(notation.COMMENT_PREFIX):
            raise InvalidStateError(
                f"Headword '{headword}' contains a reserved character"
            )
        self.headword = headword
        return self

    def add_sub_entry(self, text: str) -> Entry:
        self._require_not_redirect("Cannot add sub-entries to a redirection entry")
        return self.append_sub_entry(SubEntry(_checked_token(text, "Sub-entry text")))

    def add_sub_entries(self, texts: Iterable[str]) -> Entry:
        self._require_not_redirect("Cannot add sub-entries to a redirection entry")
        checked = [_checked_token(text, "Sub-entry text") for text in texts]
        for text in checked:
            self._attach_sub_entry(SubEntry(text))
        return self

    def add_redirect_sub_entry(
        self, target: str, types: Iterable[str] = ()
    ) -> Entry:
        return self.append_sub_entry(SubEntry(redirect=Redirect(target, tuple(types))))

    def append_sub_entry(self, sub_entry: SubEntry) -> Entry:
        """Attach an existing sub-entry object and make this entry its parent.

        Raises:
            InvalidStateError: If the sub-entry would not serialize as a
                single list item
        """
        self._require_not_redirect("Cannot add sub-entries to a redirection entry")
        _check_sub_entry(sub_entry)
        self._attach_sub_entry(sub_entry)
        return self

    def _attach_sub_entry(self, sub_entry: SubEntry) -> None:
        """Attach without checks, for sub-entries read from notation text."""
        sub_entry.parent = self
        self.sub_entries.append(sub_entry)

    def set_redirect(self, target: str, types: Iterable[str] = ()) -> Entry:
        if self.sub_entries:
            raise InvalidStateError(
                f"Cannot set redirect on an entry with sub-entries ('{self.headword}')"
            )
        if self.annotations:
            raise InvalidStateError(
                f"Cannot set redirect on an entry with annotations ('{self.headword}')"
            )
        redirect = Redirect(target, tuple(types))
        if (
            any(c in redirect.target for c in "|[]")
            or redirect.target.startswith("(")
        ):
            raise InvalidStateError(
                f"Redirect target '{redirect.target}' contains a reserved character"
            )
        _check_types(redirect.types)
        self.redirect = redirect
        return self

    def set_annotation(self, key: str, value: AnnotationValue = True) -> Entry:
        self._require_not_redirect("Cannot add annotations to a redirection entry")
        key, value = _checked_annotation(key, value)
        self.annotations[key] = value
        return self

    def set_annotations(self, annotations: Mapping[str, AnnotationValue]) -> Entry:
        self._require_not_redirect("Cannot add annotations to a redirection entry")
        checked = [_checked_annotation(k, v) for k, v in annotations.items()]
        for key, value in checked:
            self.annotations[key] = value
        return self

    def clear_annotations(self) -> Entry:
        self.annotations = {}
        return self

    def clear_sub_entries(self) -> Entry:
        for sub_entry in self.sub_entries:
            sub_entry.parent = None
        self.sub_entries = []
        return self

    def clear_redirect(self) -> Entry:
        self.redirect = None
        return self

    def clear(self) -> Entry:
        """Drop annotations, sub-entries and redirect; keep the headword."""
        return self.clear_annotations().clear_sub_entries().clear_redirect()

    def clear_all(self) -> Entry:
        self.clear()
        self.headword = None
        return self

    # ------------------------------------------------------------------
    # Derived views
    # ------------------------------------------------------------------

    def shortcuts(self, placeholder: str = "~") -> dict[str, str | None]:
        if self.is_redirect:
            return {}
        return {
            sub.text: sub.shortcut(placeholder)
            for sub in self.sub_entries
            if not sub.is_redirect and sub.text is not None
        }

    def to_string(self) -> str:
        if self.headword is None:
            return ""
        if self.redirect is not None and not self.sub_entries:
            # the entry marker is '>>', the redirect already renders one '>'
            return (
                f"{self.headword}{notation.REDIRECT_MARKER}"
                f"{self.redirect.to_string()}"
            )

        result = self.headword
        if self.annotations:
            rendered = ",".join(
                key if value is True else f"{key}{notation.KEY_VALUE_SEPARATOR}{value}"
                for key, value in self.annotations.items()
            )
            result += f"{notation.ANNOTATION_OPEN}{rendered}{notation.ANNOTATION_CLOSE}"
        if self.sub_entries:
            result += notation.SUB_ENTRY_SEPARATOR
            result += ",".join(sub.to_string() for sub in self.sub_entries)
        return result

    def __str__(self) -> str:
        return self.to_string()

    def __repr__(self) -> str:
        return f"Entry({self.to_string()!r})"

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, Entry):
            return NotImplemented
        return (
            self.headword == other.headword
            and self.annotations == other.annotations
            and self.sub_entries == other.sub_entries
            and self.redirect == other.redirect
        )

    __hash__ = None  # type: ignore[assignment]


# ------------------------------------------------------------------
# Builder argument checks
# ------------------------------------------------------------------

def _checked_token(text: str, what: str) -> str:
    """Strip ``text`` and make sure it serializes as one list item."""
    token = (text or "").strip()
    if not token:
        raise InvalidStateError(f"{what} cannot be empty")
    if any(c in token for c in "|[]>"):
        raise InvalidStateError(f"{what} '{token}' contains a reserved character")
    if not notation.parentheses_balanced(token):
        raise InvalidStateError(f"{what} '{token}' has unbalanced parentheses")
    if len(notation.smart_split(token)) != 1:
        raise InvalidStateError(f"{what} '{token}' contains a top-level comma")
    return token


def _check_types(types: tuple[str, ...]) -> None:
    for relation_type in types:
        if any(c in relation_type for c in ",()|[]>"):
            raise InvalidStateError(
                f"Relation type '{relation_type}' contains a reserved character"
            )


def _check_sub_entry(sub_entry: SubEntry) -> None:
    """Make sure ``sub_entry`` renders as one item that parses back unchanged."""
    if sub_entry.text is not None:
        _checked_token(sub_entry.text, "Sub-entry text")
    if sub_entry.redirect is not None:
        target = _checked_token(sub_entry.redirect.target, "Redirect target")
        # a leading '(' would be read back as relation types
        if target.startswith("("):
            raise InvalidStateError(f"Redirect target '{target}' cannot start with '('")
        _check_types(sub_entry.redirect.types)


def _checked_annotation(
    key: str, value: AnnotationValue
) -> tuple[str, AnnotationValue]:
    key = (key or "").strip()
    if isinstance(value, str):
        value = value.strip()
    problem = notation.annotation_problem(key, value)
    if problem is not None:
        error_cls, message = problem
        raise error_cls(message, f"{key}:{value}")
    if not isinstance(value, str):
        return key, value
    if (
        notation.SUB_ENTRY_SEPARATOR in value
        or notation.REDIRECT_MARKER in value
    ):
        raise InvalidAnnotationValueError(
            f"Annotation value '{value}' cannot contain '|' or '>'",
            f"{key}:{value}",
        )
    if (
        not notation.parentheses_balanced(value)
        or len(notation.smart_split(value)) != 1
    ):
        raise InvalidAnnotationValueError(
            f"Annotation value '{value}' would not survive the comma split",
            f"{key}:{value}",
        )
    return key, value
