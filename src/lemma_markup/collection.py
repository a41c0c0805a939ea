"""EntryCollection: an ordered list of entries with queries and validation."""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Iterable, Iterator
from pathlib import Path
from typing import overload

from lemma_markup import validator as _val
from lemma_markup.exceptions import CollectionParseError, ParseError, ValidationError
from lemma_markup.models import AnnotationValue, Entry, Redirect, ValidationIssue
from lemma_markup.notation import is_blank_or_comment
from lemma_markup.parser import parse_entry
from lemma_markup.sources import Line, read_lines, write_lines

logger = logging.getLogger(__name__)

STRING_SOURCE = "<string>"


class EntryCollection:
    """An ordered collection of entries.

    Entries with the same headword may coexist; ``add`` merges them by
    default, while parsing keeps every line as its own entry so that
    validation can report duplicates.
    """

    def __init__(self, entries: Iterable[Entry] | None = None) -> None:
        self.entries: list[Entry] = list(entries) if entries is not None else []

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def from_text(cls, text: str, *, source: str = STRING_SOURCE) -> EntryCollection:
        """Parse a block of text, one entry per line."""
        return cls.from_lines(text.splitlines(), source=source)

    @classmethod
    def from_lines(
        cls, lines: Iterable[str], *, source: str = STRING_SOURCE
    ) -> EntryCollection:
        return cls.from_source(
            (line, number, source) for number, line in enumerate(lines, start=1)
        )

    @classmethod
    def from_source(cls, lines: Iterable[Line]) -> EntryCollection:
        """Consume ``(text, line_number, source)`` triples."""
        return cls().read_source(lines)

    @classmethod
    def load(cls, path: str | Path, *, encoding: str = "utf-8") -> EntryCollection:
        """Parse a notation file."""
        return cls.from_source(read_lines(path, encoding=encoding))

    def read_source(self, lines: Iterable[Line]) -> EntryCollection:
        """Append one entry per non-blank, non-comment line.

        Raises:
            CollectionParseError: On the first line that fails to parse
        """
        count = 0
        source = None
        for text, line_number, source in lines:
            if is_blank_or_comment(text):
                continue
            try:
                entry = parse_entry(text, source=source, line_number=line_number)
            except ParseError as e:
                raise CollectionParseError(
                    e, text.strip(), line_number=line_number, source=source
                ) from e
            self.entries.append(entry)
            count += 1
        logger.debug("Parsed %d entries from %s", count, source or "empty input")
        return self

    def save(self, path: str | Path, *, encoding: str = "utf-8") -> None:
        write_lines(path, self.to_lines(), encoding=encoding)

    # ------------------------------------------------------------------
    # Container protocol
    # ------------------------------------------------------------------

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[Entry]:
        return iter(self.entries)

    @overload
    def __getitem__(self, index: int) -> Entry: ...

    @overload
    def __getitem__(self, index: slice) -> list[Entry]: ...

    def __getitem__(self, index: int | slice) -> Entry | list[Entry]:
        return self.entries[index]

    def to_lines(self) -> list[str]:
        return [entry.to_string() for entry in self.entries]

    def __str__(self) -> str:
        return "\n".join(self.to_lines())

    def __repr__(self) -> str:
        return f"EntryCollection({len(self.entries)} entries)"

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def find_by_headword(self, text: str) -> list[Entry]:
        return [entry for entry in self.entries if entry.headword == text]

    def normal_entries(self) -> list[Entry]:
        return [entry for entry in self.entries if not entry.is_redirect]

    def redirected_entries(self) -> list[Entry]:
        return [entry for entry in self.entries if entry.is_redirect]

    def find_redirections_to(
        self, target: str, relation_type: str | None = None
    ) -> list[Entry]:
        """Entries that redirect to ``target`` themselves or via a sub-entry."""

        def matches(redirect: Redirect | None) -> bool:
            return (
                redirect is not None
                and redirect.target == target
                and (relation_type is None or redirect.has_type(relation_type))
            )

        return [
            entry
            for entry in self.entries
            if (entry.is_redirect and matches(entry.redirect))
            or any(matches(sub.redirect) for sub in entry.sub_entries)
        ]

    def find_by_annotation(
        self, key: str, value: AnnotationValue | None = None
    ) -> list[Entry]:
        if value is None:
            return [entry for entry in self.entries if key in entry.annotations]
        return [
            entry for entry in self.entries if entry.annotations.get(key) == value
        ]

    def iter_words(self) -> Iterator[str]:
        """Yield every headword and every sub-entry text, in order."""
        for entry in self.entries:
            if entry.headword:
                yield entry.headword
            for sub in entry.sub_entries:
                if sub.text:
                    yield sub.text

    def all_words(self) -> list[str]:
        return list(self.iter_words())

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def add(self, entry: Entry, merge: bool = True) -> EntryCollection:
        """Add an entry, merging into an existing one with the same headword.

        Annotations are applied key by key; sub-entries are copied over
        unless a textual sub-entry with the same text is already there.
        A normal entry and a redirection entry are never merged.
        """
        existing = self._first_with_headword(entry.headword) if merge else None
        if existing is None:
            self.entries.append(entry)
            return self
        if existing is entry:
            return self

        if existing.is_redirect or entry.is_redirect:
            if existing.is_redirect and entry.is_redirect and existing.redirect == entry.redirect:
                return self
            logger.warning(
                "Not merging '%s': entries differ in kind or redirect target",
                entry.headword,
            )
            self.entries.append(entry)
            return self

        existing.set_annotations(entry.annotations)
        for sub in entry.sub_entries:
            if not sub.is_redirect and any(
                not other.is_redirect and other.text == sub.text
                for other in existing.sub_entries
            ):
                continue
            existing._attach_sub_entry(dataclasses.replace(sub))
        return self

    def add_all(self, entries: Iterable[Entry], merge: bool = True) -> EntryCollection:
        for entry in entries:
            self.add(entry, merge)
        return self

    def remove(self, entry: Entry) -> EntryCollection:
        """Remove ``entry`` (matched by identity); absent entries are ignored."""
        self.entries = [e for e in self.entries if e is not entry]
        return self

    def clear(self) -> EntryCollection:
        self.entries = []
        return self

    def _first_with_headword(self, headword: str | None) -> Entry | None:
        for entry in self.entries:
            if entry.headword == headword:
                return entry
        return None

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def validate_headwords(self) -> None:
        _val.raise_first(_val.check_duplicate_headwords(self.entries))

    def validate_role_conflicts(self) -> None:
        _val.raise_first(_val.check_role_conflicts(self.entries))

    def validate_circular_dependencies(self) -> None:
        _val.raise_first(_val.check_circular_dependencies(self.entries))

    def validate_redirections(self) -> None:
        _val.raise_first(_val.check_circular_redirections(self.entries))

    def validate(self) -> None:
        """Run all passes; raise a ValidationError subclass for the first finding."""
        _val.validate(self.entries)

    def is_valid(self) -> bool:
        try:
            self.validate()
        except ValidationError as e:
            logger.info("Validation error: %s", e)
            return False
        return True

    def validation_issues(self) -> list[ValidationIssue]:
        return _val.validate_all(self.entries)

    def validate_all(self) -> list[str]:
        """Return every validation message; never raises."""
        return [issue.message for issue in self.validation_issues()]
