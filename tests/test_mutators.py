import re

from vocaaid.modules.vocabulary import mutators
from vocaaid.modules.vocabulary.models import Dataset, Selection, SelectionKind, Word


def test_generate_id_format():
    first, second = mutators.generate_id(), mutators.generate_id()
    assert re.fullmatch(r"\d+-[0-9a-f]{9}", first)
    assert first != second


class TestWords:
    def test_add_word_prepends_and_trims(self, dataset):
        updated = mutators.add_word(dataset, "  cat ", " 고양이 ", "  ", "f2")
        assert updated is not dataset
        new = updated.words[0]
        assert (new.english, new.korean, new.korean2, new.folder_id) == (
            "cat",
            "고양이",
            None,
            "f2",
        )
        assert new.is_starred is False
        assert len(updated.words) == len(dataset.words) + 1
        # input untouched
        assert dataset.words[0].id == "w1"

    def test_add_word_blank_is_noop(self, dataset):
        assert mutators.add_word(dataset, "   ", "고양이") is dataset
        assert mutators.add_word(dataset, "cat", "") is dataset

    def test_add_word_caps_length(self):
        updated = mutators.add_word(Dataset(), "a" * 600, "b")
        assert len(updated.words[0].english) == 500

    def test_delete_word(self, dataset):
        updated = mutators.delete_word(dataset, "w2")
        assert [w.id for w in updated.words] == ["w1", "w3", "w4"]
        assert mutators.delete_word(dataset, "missing") is dataset

    def test_update_word_rejects_blank(self, dataset):
        word = dataset.find_word("w1").model_copy(update={"korean": "  "})
        assert mutators.update_word(dataset, word) is dataset

    def test_update_word_keeps_position(self, dataset):
        word = dataset.find_word("w3").model_copy(update={"english": " puppy "})
        updated = mutators.update_word(dataset, word)
        assert [w.id for w in updated.words] == ["w1", "w2", "w3", "w4"]
        assert updated.find_word("w3").english == "puppy"

    def test_toggle_star_twice_restores(self, dataset):
        once = mutators.toggle_star(dataset, "w2")
        assert once.find_word("w2").is_starred is True
        twice = mutators.toggle_star(once, "w2")
        assert twice.find_word("w2").is_starred is False

    def test_set_star_same_value_is_noop(self, dataset):
        assert mutators.set_star(dataset, "w1", True) is dataset
        assert mutators.set_star(dataset, "w1", False).find_word("w1").is_starred is False

    def test_move_words(self, dataset):
        updated = mutators.move_words(dataset, ["w1", "w4"], "f2")
        assert updated.find_word("w1").folder_id == "f2"
        assert updated.find_word("w4").folder_id == "f2"
        assert updated.find_word("w2").folder_id == "f1"
        assert mutators.move_words(dataset, [], "f2") is dataset

    def test_unknown_folder_is_noop(self, dataset):
        assert mutators.add_word(dataset, "cat", "고양이", None, "gone") is dataset
        moved = dataset.find_word("w1").model_copy(update={"folder_id": "gone"})
        assert mutators.update_word(dataset, moved) is dataset
        assert mutators.move_words(dataset, ["w1"], "gone") is dataset
        assert mutators.move_words(dataset, ["w1"], None).find_word("w1").folder_id is None

    def test_add_after_folder_delete_is_noop(self, dataset):
        without_f2 = mutators.delete_folder(dataset, "f2", confirmed=True)
        assert mutators.add_word(without_f2, "cat", "고양이", None, "f2") is without_f2

    def test_assign_remote_ids(self, dataset):
        updated = mutators.assign_remote_ids(dataset, {"w1": "page-1", "nope": "x"})
        assert updated.find_word("w1").remote_id == "page-1"
        assert mutators.assign_remote_ids(updated, {"w1": "page-1"}) is updated

    def test_adopt_remote_words_cleans_rows(self, dataset):
        pulled = [
            Word(id="p1", english=" pear ", korean="배", folder_id="f1"),
            Word(id="p2", english="", korean="빈"),
            Word(id="p3", english="kiwi", korean="  "),
            Word(id="p4", english="plum", korean="자두", folder_id="remote-only"),
        ]
        adopted = mutators.adopt_remote_words(dataset, pulled)
        assert [w.id for w in adopted] == ["p1", "p4"]
        assert adopted[0].english == "pear"
        assert adopted[0].folder_id == "f1"
        assert adopted[1].folder_id is None


class TestFolders:
    def test_add_and_rename_folder(self, dataset):
        updated = mutators.add_folder(dataset, "  Verbs ")
        assert updated.folders[-1].name == "Verbs"
        renamed = mutators.rename_folder(updated, updated.folders[-1].id, "Actions")
        assert renamed.folders[-1].name == "Actions"
        assert mutators.add_folder(dataset, " ") is dataset
        assert mutators.rename_folder(dataset, "missing", "x") is dataset

    def test_delete_folder_unassigns_its_words(self, dataset):
        updated = mutators.delete_folder(dataset, "f1", confirmed=True)
        assert [f.id for f in updated.folders] == ["f2"]
        assert updated.find_word("w1").folder_id is None
        assert updated.find_word("w2").folder_id is None
        assert updated.find_word("w3").folder_id == "f2"
        # no word points at a folder that no longer exists
        ids = {f.id for f in updated.folders}
        assert all(w.folder_id is None or w.folder_id in ids for w in updated.words)

    def test_delete_folder_requires_confirmation(self, dataset):
        assert mutators.delete_folder(dataset, "f1", confirmed=False) is dataset


class TestQueries:
    def test_count_words(self, dataset):
        assert mutators.count_words(dataset, Selection.folder("f1")) == 2
        assert mutators.count_words(dataset, Selection(kind=SelectionKind.STARRED)) == 2

    def test_search_matches_any_text_case_insensitively(self, dataset):
        assert [w.id for w in mutators.search_words(dataset, "APP")] == ["w1"]
        assert [w.id for w in mutators.search_words(dataset, "강아지")] == ["w3"]
        assert len(mutators.search_words(dataset, "  ")) == 4

    def test_search_within_selection(self, dataset):
        hits = mutators.search_words(dataset, "a", Selection.folder("f1"))
        assert [w.id for w in hits] == ["w1", "w2"]

    def test_word_accepts_secondary_answer(self):
        word = Word(id="x", english="dog", korean="개", korean2="강아지")
        assert word.accepts(" 강아지 ")
        assert not word.accepts("")
