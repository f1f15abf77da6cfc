"""Shared fixtures for the imaginarium test suite."""

import pytest

from imaginarium import Ontology, Session


def _tell(session, *sentences):
    """Run sentences, failing the test on the first error."""
    for sentence in sentences:
        result = session.user_command(sentence)
        assert result.error is None, f"{sentence!r}: {result.error}"
    return session


@pytest.fixture
def ontology():
    """An empty ontology."""
    return Ontology()


@pytest.fixture
def session():
    """A session with a fixed seed and no definitions directory."""
    return Session(seed=1)


@pytest.fixture
def tell():
    return _tell


@pytest.fixture
def animals(session):
    """A session that knows dogs and cats are animals, and that cats have colors."""
    return _tell(
        session,
        "a dog is a kind of animal",
        "a cat is a kind of animal",
        "cats can be black or white",
    )
