import random

import pytest

from vocaaid.core.errors import EmptySelectionError
from vocaaid.modules.sessions.study import StudySession, StudyStatus
from vocaaid.modules.vocabulary.models import Selection, SelectionKind


@pytest.fixture
def session():
    return StudySession(rng=random.Random(7))


def test_start_shuffles_a_snapshot(session, dataset):
    session.start(dataset, Selection())
    assert session.status == StudyStatus.IN_PROGRESS
    assert sorted(w.id for w in session.words) == ["w1", "w2", "w3", "w4"]
    assert session.index == 0
    assert session.revealed is False


def test_same_seed_same_order(dataset):
    a, b = StudySession(rng=random.Random(3)), StudySession(rng=random.Random(3))
    a.start(dataset, Selection())
    b.start(dataset, Selection())
    assert [w.id for w in a.words] == [w.id for w in b.words]


def test_empty_selection_is_rejected(session, dataset):
    with pytest.raises(EmptySelectionError):
        session.start(dataset, Selection.folder("missing"))
    assert session.status == StudyStatus.NOT_STARTED


class TestFlipping:
    """Reveal and advance transitions plus the keyboard bindings."""

    def test_reveal_is_idempotent(self, session, dataset):
        session.start(dataset, Selection())
        assert session.reveal() is True
        assert session.reveal() is False
        assert session.revealed is True
        assert session.index == 0

    def test_advance_needs_reveal(self, session, dataset):
        session.start(dataset, Selection())
        assert session.advance() is False
        session.reveal()
        assert session.advance() is True
        assert session.index == 1
        assert session.revealed is False

    def test_runs_to_completion(self, session, dataset):
        session.start(dataset, Selection(kind=SelectionKind.STARRED))
        assert session.total == 2
        for _ in range(2):
            session.press(" ")
            session.press(" ")
        assert session.status == StudyStatus.COMPLETED
        assert session.current is None
        assert session.press(" ") is None

    def test_star_key_updates_snapshot(self, session, dataset):
        session.start(dataset, Selection())
        before = session.current
        changed = session.press("s")
        assert changed.id == before.id
        assert changed.is_starred is (not before.is_starred)
        assert session.current.is_starred is changed.is_starred

    def test_retry_reads_dataset_again(self, session, dataset):
        session.start(dataset, Selection.folder("f1"))
        session.reveal()
        session.advance()
        smaller = dataset.model_copy(update={"words": dataset.words[:1]})
        session.retry(smaller)
        assert session.total == 1
        assert session.index == 0

    def test_reset(self, session, dataset):
        session.start(dataset, Selection())
        session.reset()
        assert session.status == StudyStatus.NOT_STARTED
        assert session.words == []
