"""Tests for the validation engine."""

import pytest

from lemma_markup import (
    CircularDependencyError,
    CircularRedirectionError,
    DuplicateHeadwordError,
    Entry,
    EntryCollection,
    RoleConflictError,
    ValidationError,
)
from lemma_markup.validator import check_circular_dependencies, source_location


def rule_ids(collection):
    return [issue.rule_id for issue in collection.validation_issues()]


class TestValidClean:
    """A well-formed collection passes every check."""

    def test_sample_is_valid(self, collection):
        collection.validate()
        assert collection.is_valid()
        assert collection.validate_all() == []

    def test_empty_collection(self):
        assert EntryCollection().is_valid()


class TestDuplicateHeadwords:
    """VAL-DUP-001."""

    def test_detected(self):
        collection = EntryCollection.from_text("run|run up\nwalk\nrun|run away", source="v.lm")
        with pytest.raises(DuplicateHeadwordError) as exc_info:
            collection.validate_headwords()
        error = exc_info.value
        assert error.word == "run"
        assert str(error) == "Duplicate headword detected: 'run' at v.lm:1, col: 1 and v.lm:3, col: 1"
        assert error.locations == ("v.lm:1, col: 1", "v.lm:3, col: 1")

    def test_duplicate_redirections(self):
        collection = EntryCollection.from_text("better>>good\nbetter>>(cmp)good")
        assert rule_ids(collection) == ["VAL-DUP-001"]

    def test_unknown_location_for_built_entries(self):
        collection = EntryCollection([Entry("run"), Entry("run")])
        message = collection.validate_all()[0]
        assert "unknown location and unknown location" in message


class TestRoleConflicts:
    """VAL-ROLE-001 to VAL-ROLE-004."""

    def test_normal_and_redirection_headword(self):
        collection = EntryCollection([
            Entry("better").add_sub_entry("better off"),
            Entry("better").set_redirect("good"),
        ])
        assert "VAL-ROLE-001" in rule_ids(collection)

    def test_headword_is_sub_entry(self):
        collection = EntryCollection.from_text("run|walk\nwalk", source="v.lm")
        with pytest.raises(RoleConflictError) as exc_info:
            collection.validate_role_conflicts()
        assert str(exc_info.value) == (
            "Word 'walk' is both a headword (v.lm:2, col: 1) "
            "and a sub-entry of run (v.lm:1, col: 5)"
        )
        assert exc_info.value.word == "walk"

    def test_redirection_headword_is_sub_entry(self):
        collection = EntryCollection.from_text("run|ran\nran>>(sp)run")
        assert rule_ids(collection) == ["VAL-ROLE-003"]

    def test_sub_entry_in_several_entries(self):
        collection = EntryCollection.from_text("run|get away\nget|get away")
        issues = collection.validation_issues()
        assert [i.rule_id for i in issues] == ["VAL-ROLE-004"]
        assert issues[0].word == "get away"
        assert "appears in multiple entries: run (" in issues[0].message

    def test_repeated_sub_entry_under_one_headword(self):
        collection = EntryCollection.from_text("run|run up,run up")
        assert collection.is_valid()

    def test_redirect_sub_entries_are_ignored(self):
        collection = EntryCollection.from_text("rose|>(sp)rise\nrise|rise up")
        assert collection.is_valid()


class TestCircularDependencies:
    """VAL-CYC-001."""

    def test_two_node_cycle(self):
        collection = EntryCollection([
            Entry("a").add_sub_entry("b"),
            Entry("b").add_sub_entry("a"),
        ])
        # b and a are also sub-entries, so role conflicts come first
        with pytest.raises(RoleConflictError):
            collection.validate()
        with pytest.raises(CircularDependencyError) as exc_info:
            collection.validate_circular_dependencies()
        assert exc_info.value.chain == ("a", "b", "a")
        assert str(exc_info.value).startswith("Circular dependency detected: a (")

    def test_validate_all_withholds_cycles_behind_role_conflicts(self):
        collection = EntryCollection([
            Entry("a").add_sub_entry("b"),
            Entry("b").add_sub_entry("a"),
        ])
        ids = rule_ids(collection)
        assert "VAL-CYC-001" not in ids
        assert "VAL-ROLE-002" in ids

    def test_non_headword_sub_entries_are_leaves(self):
        collection = EntryCollection.from_text("a|x,y\nb|z")
        collection.validate_circular_dependencies()

    def test_each_cycle_reported_once(self):
        collection = EntryCollection([
            Entry("a").add_sub_entry("b"),
            Entry("b").add_sub_entry("c"),
            Entry("c").add_sub_entry("a"),
        ])
        issues = check_circular_dependencies(collection.entries)
        assert len(issues) == 1
        assert issues[0].chain == ("a", "b", "c", "a")

    def test_long_chain_without_cycle(self):
        size = 5000
        entries = [Entry(f"w{i}").add_sub_entry(f"w{i + 1}") for i in range(size)]
        entries.append(Entry(f"w{size}"))
        collection = EntryCollection(entries)
        collection.validate_circular_dependencies()

    def test_long_cycle(self):
        size = 5000
        entries = [Entry(f"w{i}").add_sub_entry(f"w{(i + 1) % size}") for i in range(size)]
        issues = check_circular_dependencies(entries)
        assert len(issues) == 1
        assert len(issues[0].chain) == size + 1
        assert issues[0].chain[0] == issues[0].chain[-1] == "w0"


class TestCircularRedirections:
    """VAL-CYC-002."""

    def test_three_step_cycle(self):
        collection = EntryCollection.from_text("A>>(rel)B\nB>>(rel)C\nC>>(rel)A", source="r.lm")
        with pytest.raises(CircularRedirectionError) as exc_info:
            collection.validate()
        error = exc_info.value
        assert error.chain == ("A", "B", "C", "A")
        assert str(error) == (
            "Circular redirection detected: A (r.lm:1, col: 1) -> B (r.lm:2, col: 1) "
            "-> C (r.lm:3, col: 1) -> A (r.lm:1, col: 1)"
        )

    def test_cycle_reported_once_in_validate_all(self):
        collection = EntryCollection.from_text("A>>B\nB>>C\nC>>A")
        assert rule_ids(collection) == ["VAL-CYC-002"]

    def test_self_redirection(self):
        collection = EntryCollection.from_text("A>>A")
        with pytest.raises(CircularRedirectionError):
            collection.validate_redirections()

    def test_chain_into_cycle_not_reported_for_entry(self):
        collection = EntryCollection.from_text("X>>A\nA>>B\nB>>A")
        issues = collection.validation_issues()
        assert len(issues) == 1
        assert issues[0].chain == ("A", "B", "A")

    def test_chain_ending_elsewhere_is_fine(self):
        collection = EntryCollection.from_text("A>>B\nB>>C\nC|C up")
        collection.validate_redirections()


class TestValidateOrdering:
    """validate() raises the first finding; validate_all() collects them."""

    def test_duplicates_reported_before_role_conflicts(self):
        collection = EntryCollection.from_text("run|walk\nwalk\nwalk")
        with pytest.raises(DuplicateHeadwordError):
            collection.validate()

    def test_validate_all_collects_in_order(self):
        collection = EntryCollection.from_text("run|walk\nwalk\nwalk\nget|walk")
        ids = rule_ids(collection)
        assert ids[0] == "VAL-DUP-001"
        assert "VAL-ROLE-002" in ids
        assert "VAL-ROLE-004" in ids

    def test_validate_all_returns_messages(self):
        collection = EntryCollection.from_text("run\nrun")
        messages = collection.validate_all()
        assert messages == [
            "Duplicate headword detected: 'run' at <string>:1, col: 1 and <string>:2, col: 1"
        ]

    def test_errors_share_base_class(self):
        collection = EntryCollection.from_text("run\nrun")
        with pytest.raises(ValidationError):
            collection.validate()

    def test_is_valid_logs_reason(self, caplog):
        collection = EntryCollection.from_text("run\nrun")
        with caplog.at_level("INFO", logger="lemma_markup.collection"):
            assert not collection.is_valid()
        assert "Duplicate headword detected" in caplog.text


class TestSourceLocation:
    """Location strings used in messages."""

    def test_with_column(self):
        entry = Entry.parse("run", source="a.lm", line_number=2)
        assert source_location(entry) == "a.lm:2, col: 1"

    def test_without_source(self):
        assert source_location(Entry("run")) == "unknown location"
