"""Validation engine for lemma-markup collections."""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Callable, Iterator, Sequence
from dataclasses import dataclass, field

from lemma_markup.exceptions import (
    CircularDependencyError,
    CircularRedirectionError,
    DuplicateHeadwordError,
    RoleConflictError,
    ValidationError,
)
from lemma_markup.models import Entry, SubEntry, ValidationIssue

logger = logging.getLogger(__name__)

Check = Callable[[Sequence[Entry]], list[ValidationIssue]]

_RULE_ERRORS: dict[str, type[ValidationError]] = {
    "VAL-DUP-001": DuplicateHeadwordError,
    "VAL-ROLE-001": RoleConflictError,
    "VAL-ROLE-002": RoleConflictError,
    "VAL-ROLE-003": RoleConflictError,
    "VAL-ROLE-004": RoleConflictError,
    "VAL-CYC-001": CircularDependencyError,
    "VAL-CYC-002": CircularRedirectionError,
}


def source_location(item: Entry | SubEntry) -> str:
    """Format ``file:line, col: n`` for an entry or sub-entry."""
    if item.source_file and item.source_line:
        col_info = f", col: {item.source_column}" if item.source_column else ""
        return f"{item.source_file}:{item.source_line}{col_info}"
    return "unknown location"


def to_exception(issue: ValidationIssue) -> ValidationError:
    """Build the exception matching a finding's rule."""
    error_cls = _RULE_ERRORS.get(issue.rule_id, ValidationError)
    return error_cls(
        issue.message,
        word=issue.word,
        locations=issue.locations,
        chain=issue.chain,
    )


def raise_first(issues: list[ValidationIssue]) -> None:
    if issues:
        raise to_exception(issues[0])


def validate(entries: Sequence[Entry]) -> None:
    """Run every pass in order and raise for the first finding."""
    for check in CHECKS:
        raise_first(check(entries))


def validate_all(entries: Sequence[Entry]) -> list[ValidationIssue]:
    """Collect every finding.

    Cycle detection only runs when duplicates and role conflicts are
    absent, since those already make the graphs ambiguous.
    """
    results: list[ValidationIssue] = []
    results.extend(check_duplicate_headwords(entries))
    results.extend(check_role_conflicts(entries))
    if not results:
        results.extend(check_circular_dependencies(entries))
        results.extend(check_circular_redirections(entries))
    return results


# ------------------------------------------------------------------
# Individual passes
# ------------------------------------------------------------------

def check_duplicate_headwords(entries: Sequence[Entry]) -> list[ValidationIssue]:
    """Headwords that appear on more than one entry."""
    locations: dict[str, list[str]] = defaultdict(list)
    for entry in entries:
        if entry.headword is not None:
            locations[entry.headword].append(source_location(entry))

    results = []
    for word, locs in locations.items():
        if len(locs) > 1:
            results.append(ValidationIssue(
                rule_id="VAL-DUP-001",
                word=word,
                message=f"Duplicate headword detected: '{word}' at {' and '.join(locs)}",
                locations=tuple(locs),
            ))
    logger.debug("Duplicate headword check: %d issue(s)", len(results))
    return results


def check_role_conflicts(entries: Sequence[Entry]) -> list[ValidationIssue]:
    """Words used as more than one of: headword, redirection, sub-entry."""
    normal: dict[str, Entry] = {}
    redirection: dict[str, Entry] = {}
    owners: dict[str, list[tuple[Entry, SubEntry]]] = defaultdict(list)

    for entry in entries:
        if entry.headword is None:
            continue
        if entry.is_redirect:
            redirection.setdefault(entry.headword, entry)
            continue
        normal.setdefault(entry.headword, entry)
        for sub in entry.sub_entries:
            if sub.is_redirect or sub.text is None:
                continue
            owners[sub.text].append((entry, sub))

    def owner_info(word: str) -> str:
        return ", ".join(
            f"{owner.headword} ({source_location(sub)})" for owner, sub in owners[word]
        )

    results = []
    for word, entry in normal.items():
        if word in redirection:
            loc1 = source_location(entry)
            loc2 = source_location(redirection[word])
            results.append(ValidationIssue(
                rule_id="VAL-ROLE-001",
                word=word,
                message=(
                    f"Word '{word}' is both a normal headword ({loc1}) "
                    f"and a redirection headword ({loc2})"
                ),
                locations=(loc1, loc2),
            ))

    for rule_id, role, headwords in (
        ("VAL-ROLE-002", "headword", normal),
        ("VAL-ROLE-003", "redirection headword", redirection),
    ):
        for word, entry in headwords.items():
            if word not in owners:
                continue
            loc = source_location(entry)
            results.append(ValidationIssue(
                rule_id=rule_id,
                word=word,
                message=(
                    f"Word '{word}' is both a {role} ({loc}) "
                    f"and a sub-entry of {owner_info(word)}"
                ),
                locations=(loc, *(source_location(s) for _, s in owners[word])),
            ))

    for word, claims in owners.items():
        distinct = {owner.headword for owner, _ in claims}
        if len(distinct) > 1:
            results.append(ValidationIssue(
                rule_id="VAL-ROLE-004",
                word=word,
                message=f"Sub-entry '{word}' appears in multiple entries: {owner_info(word)}",
                locations=tuple(source_location(s) for _, s in claims),
            ))

    logger.debug("Role conflict check: %d issue(s)", len(results))
    return results


@dataclass
class _CycleSearch:
    """Depth-first search state shared across one traversal."""

    graph: dict[str, list[str]]
    visited: set[str] = field(default_factory=set)
    path: list[str] = field(default_factory=list)
    on_path: set[str] = field(default_factory=set)
    cycles: list[list[str]] = field(default_factory=list)

    def _enter(self, node: str) -> Iterator[str]:
        self.visited.add(node)
        self.path.append(node)
        self.on_path.add(node)
        return iter(self.graph.get(node, ()))

    def visit(self, start: str) -> None:
        """Walk everything reachable from ``start`` with an explicit stack."""
        stack = [(start, self._enter(start))]
        while stack:
            node, neighbors = stack[-1]
            for neighbor in neighbors:
                # words that are not headwords cannot close a cycle
                if neighbor not in self.graph:
                    continue
                if neighbor in self.on_path:
                    index = self.path.index(neighbor)
                    self.cycles.append(self.path[index:] + [neighbor])
                elif neighbor not in self.visited:
                    stack.append((neighbor, self._enter(neighbor)))
                    break
            else:
                stack.pop()
                self.path.pop()
                self.on_path.discard(node)


def check_circular_dependencies(entries: Sequence[Entry]) -> list[ValidationIssue]:
    """Headwords reachable from themselves through textual sub-entries."""
    graph: dict[str, list[str]] = {}
    locations: dict[str, str] = {}

    for entry in entries:
        if entry.is_redirect or entry.headword is None:
            continue
        locations.setdefault(entry.headword, source_location(entry))
        dependencies = graph.setdefault(entry.headword, [])
        for sub in entry.sub_entries:
            if sub.is_redirect or sub.text is None:
                continue
            dependencies.append(sub.text)
            locations.setdefault(sub.text, source_location(sub))

    search = _CycleSearch(graph)
    for start in graph:
        if start not in search.visited:
            search.visit(start)

    results = [
        _cycle_issue("VAL-CYC-001", "Circular dependency detected", cycle, locations)
        for cycle in search.cycles
    ]
    logger.debug("Circular dependency check: %d issue(s)", len(results))
    return results


def check_circular_redirections(entries: Sequence[Entry]) -> list[ValidationIssue]:
    """Redirection chains that lead back to where they started."""
    targets: dict[str, str] = {}
    locations: dict[str, str] = {}
    for entry in entries:
        if entry.headword is None or entry.redirect is None or entry.sub_entries:
            continue
        targets.setdefault(entry.headword, entry.redirect.target)
        locations.setdefault(entry.headword, source_location(entry))

    results = []
    reported: set[frozenset[str]] = set()
    for start in targets:
        chain: list[str] = []
        seen: set[str] = set()
        current = start
        while current in targets and current not in seen:
            chain.append(current)
            seen.add(current)
            current = targets[current]

        if current != start:
            continue
        members = frozenset(chain)
        if members in reported:
            continue
        reported.add(members)
        results.append(
            _cycle_issue(
                "VAL-CYC-002", "Circular redirection detected", chain + [start], locations
            )
        )

    logger.debug("Circular redirection check: %d issue(s)", len(results))
    return results


def _cycle_issue(
    rule_id: str, title: str, cycle: list[str], locations: dict[str, str]
) -> ValidationIssue:
    rendered = " -> ".join(
        f"{word} ({locations.get(word, 'unknown location')})" for word in cycle
    )
    return ValidationIssue(
        rule_id=rule_id,
        word=cycle[0],
        message=f"{title}: {rendered}",
        locations=tuple(locations.get(word, "unknown location") for word in cycle),
        chain=tuple(cycle),
    )


CHECKS: tuple[Check, ...] = (
    check_duplicate_headwords,
    check_role_conflicts,
    check_circular_dependencies,
    check_circular_redirections,
)
