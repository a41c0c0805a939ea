"""
Line parser for the entry notation.

One line holds one entry::

    run[sp:ran,pp:run]|run away,run up
    children>>(pl)child
    rose|>(sp)rise
"""
from __future__ import annotations

import re
from typing import Optional

from lemma_markup import notation
from lemma_markup.exceptions import (
    EmptyAnnotationBlockError,
    EmptyInputError,
    EmptyRedirectTargetError,
    MalformedAnnotationError,
    MalformedRedirectionError,
    MalformedSubEntryError,
    MismatchedBracketsError,
    MissingHeadwordTextError,
    ParseError,
)
from lemma_markup.models import Entry, Redirect, SubEntry
from lemma_markup.notation import smart_split as smart_split

# Optional "(t1,t2)" relation types followed by the target
_REDIRECT_RE = re.compile(r"^\s*(?:\((?P<types>[^)]*)\))?(?P<target>.*)$", re.DOTALL)


def parse_entry(
    line: str,
    *,
    source: Optional[str] = None,
    line_number: Optional[int] = None,
) -> Entry:
    """Parse one notation line into an Entry.

    Args:
        line: The raw line; surrounding whitespace is ignored
        source: Source identity recorded on the entry and its sub-entries
        line_number: 1-based line number recorded alongside ``source``

    Returns:
        The parsed Entry

    Raises:
        ParseError: A subclass naming the malformation
    """
    return _LineParser(line, source, line_number).parse()


class _LineParser:
    """Parses a single line, keeping the context every error needs."""

    def __init__(
        self,
        line: str,
        source: Optional[str],
        line_number: Optional[int],
    ) -> None:
        self.text = (line or "").strip()
        self.source = source
        self.line_number = line_number

    def error(self, error_cls: type[ParseError], message: str) -> ParseError:
        return error_cls(
            message, self.text, line_number=self.line_number, source=self.source
        )

    def parse(self) -> Entry:
        text = self.text
        if not text:
            raise self.error(EmptyInputError, "Empty entry input")

        opened = text.count(notation.ANNOTATION_OPEN)
        closed = text.count(notation.ANNOTATION_CLOSE)
        if opened != closed:
            raise self.error(
                MismatchedBracketsError,
                f"Mismatched brackets: {opened} '[' but {closed} ']'",
            )
        if text.startswith(notation.SUB_ENTRY_SEPARATOR):
            raise self.error(
                MissingHeadwordTextError, "Sub-entries given before any headword"
            )

        entry = Entry(
            source_file=self.source,
            source_line=self.line_number,
            source_column=1 if self.line_number is not None else None,
        )

        if notation.ENTRY_REDIRECT_MARKER in text:
            self._parse_redirection(entry)
            return entry

        head, separator, tail = text.partition(notation.SUB_ENTRY_SEPARATOR)
        self._parse_headword(entry, head)
        if separator:
            self._parse_sub_entries(entry, tail, offset=len(head) + 1)
        return entry

    # ------------------------------------------------------------------
    # Redirection entries
    # ------------------------------------------------------------------

    def _parse_redirection(self, entry: Entry) -> None:
        text = self.text
        if notation.SUB_ENTRY_SEPARATOR in text:
            raise self.error(
                MalformedRedirectionError,
                "Redirection entries cannot have sub-entries",
            )
        if notation.ANNOTATION_OPEN in text:
            raise self.error(
                MalformedRedirectionError,
                "Redirection entries cannot have annotations",
            )

        headword, _, rest = text.partition(notation.ENTRY_REDIRECT_MARKER)
        headword = headword.strip()
        if not headword:
            raise self.error(
                MalformedRedirectionError, "Redirection without a headword"
            )
        if not rest.strip():
            raise self.error(
                MalformedRedirectionError,
                f"Redirection marker '>>' without a target after '{headword}'",
            )

        entry.headword = headword
        entry.redirect = self._parse_redirect_target(rest)

    def _parse_redirect_target(self, rest: str) -> Redirect:
        """Parse ``(t1,t2)target`` or ``target`` (leading '>' already removed)."""
        match = _REDIRECT_RE.match(rest)
        if match is None:
            raise self.error(
                MalformedRedirectionError, f"Malformed redirect '{rest.strip()}'"
            )
        types: tuple[str, ...] = ()
        if match.group("types") is not None:
            types = tuple(t.strip() for t in match.group("types").split(","))
            if not all(types):
                raise self.error(
                    MalformedRedirectionError,
                    f"Empty relation type in '{rest.strip()}'",
                )
        target = match.group("target").strip()
        if not target:
            raise self.error(
                EmptyRedirectTargetError,
                f"Redirect target is empty in '{rest.strip()}'",
            )
        return Redirect(target, types)

    # ------------------------------------------------------------------
    # Headword and annotations
    # ------------------------------------------------------------------

    def _parse_headword(self, entry: Entry, part: str) -> None:
        if notation.ANNOTATION_OPEN not in part:
            headword = part.strip()
            if not headword:
                raise self.error(MissingHeadwordTextError, "Missing headword text")
            entry.headword = headword
            return

        base, _, block = part.partition(notation.ANNOTATION_OPEN)
        block = block.rstrip()
        if not block.endswith(notation.ANNOTATION_CLOSE):
            raise self.error(
                MalformedAnnotationError, "Malformed annotation: missing closing ']'"
            )
        headword = base.strip()
        if not headword:
            raise self.error(
                MissingHeadwordTextError, "Missing headword text before '['"
            )
        inner = block[:-1]
        if not inner.strip():
            raise self.error(EmptyAnnotationBlockError, "Empty annotation block")

        entry.headword = headword
        self._parse_annotations(entry, inner)

    def _parse_annotations(self, entry: Entry, block: str) -> None:
        """Parse annotations like ``sp:ran,pp:run`` or ``irregular``."""
        for piece in smart_split(block):
            piece = piece.strip()
            if notation.KEY_VALUE_SEPARATOR in piece:
                key, _, raw_value = piece.partition(notation.KEY_VALUE_SEPARATOR)
                key, value = key.strip(), raw_value.strip()
            else:
                key, value = piece, True

            problem = notation.annotation_problem(key, value)
            if problem is not None:
                error_cls, message = problem
                raise self.error(error_cls, message)
            entry.annotations[key] = value

    # ------------------------------------------------------------------
    # Sub-entries
    # ------------------------------------------------------------------

    def _parse_sub_entries(self, entry: Entry, part: str, offset: int) -> None:
        if not part.strip():
            raise self.error(MalformedSubEntryError, "Empty sub-entry list after '|'")

        for piece, start in notation.split_with_offsets(part):
            item = piece.strip()
            if not item:
                raise self.error(MalformedSubEntryError, "Empty sub-entry")
            for reserved in (
                notation.SUB_ENTRY_SEPARATOR,
                notation.ANNOTATION_OPEN,
                notation.ANNOTATION_CLOSE,
            ):
                if reserved in item:
                    raise self.error(
                        MalformedSubEntryError,
                        f"Sub-entry '{item}' contains reserved character '{reserved}'",
                    )

            if item.startswith(notation.REDIRECT_MARKER):
                sub_entry = SubEntry(redirect=self._parse_redirect_target(item[1:]))
            elif notation.REDIRECT_MARKER in item:
                text, _, rest = item.partition(notation.REDIRECT_MARKER)
                sub_entry = SubEntry(text, self._parse_redirect_target(rest))
            else:
                sub_entry = SubEntry(item)

            if self.line_number is not None:
                leading = len(piece) - len(piece.lstrip())
                sub_entry.source_file = self.source
                sub_entry.source_line = self.line_number
                sub_entry.source_column = offset + start + leading + 1
            entry._attach_sub_entry(sub_entry)
