"""Shared test fixtures for lemma-markup."""

import pytest

from lemma_markup import EntryCollection


SAMPLE_TEXT = """\
# irregular verbs
run[sp:ran,pp:run]|run away,run up
abandon|abandoned,abandonment
better>>(cmp)good
rose|>(sp)rise

children>>(pl)child
go[irregular]|go on,go out,went>(sp)go
"""


@pytest.fixture
def sample_text():
    return SAMPLE_TEXT


@pytest.fixture
def collection():
    """Collection parsed from the sample text."""
    return EntryCollection.from_text(SAMPLE_TEXT, source="sample.lm")


@pytest.fixture
def notation_file(tmp_path):
    """The sample text written to a file."""
    path = tmp_path / "sample.lm"
    path.write_text(SAMPLE_TEXT, encoding="utf-8")
    return path
