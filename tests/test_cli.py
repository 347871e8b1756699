import asyncio
import json

from vocaaid.modules.sessions.quiz import QuizStatus
from vocaaid.modules.sessions.study import StudyStatus
from vocaaid.modules.vocabulary import cli
from vocaaid.modules.vocabulary.models import Selection


def _scripted(answers):
    replies = iter(answers)
    return lambda _prompt: next(replies)


def _end_of_input(_prompt):
    raise EOFError


def test_import_list_export(tmp_path, test_settings, dataset, capsys):
    source = tmp_path / "in.json"
    source.write_text(json.dumps(dataset.to_document()), encoding="utf-8")

    assert cli.main(["import", str(source)], settings=test_settings) == 1
    assert "confirm" in capsys.readouterr().out

    assert cli.main(["import", str(source), "--yes"], settings=test_settings) == 0
    assert "Imported 2 folders and 4 words" in capsys.readouterr().out

    assert cli.main(["list", "--starred"], settings=test_settings) == 0
    out = capsys.readouterr().out
    assert "apple" in out and "hello" in out and "banana" not in out

    target = tmp_path / "out.json"
    assert cli.main(["export", "--out", str(target)], settings=test_settings) == 0
    exported = json.loads(target.read_text(encoding="utf-8"))
    assert exported["source"] == "VocaAid-Python"
    assert len(exported["words"]) == 4


def test_study_and_quiz_loops(test_settings, dataset):
    async def scenario():
        async with cli.open_vocabulary(test_settings) as vocabulary:
            await vocabulary.import_document(dataset.to_document(), confirmed=True)
            study = await cli.run_study(
                vocabulary, Selection.folder("f2"), _scripted(["", "s", ""])
            )
            quiz = await cli.run_quiz(
                vocabulary, Selection.folder("f2"), _scripted(["강아지"])
            )
            stored = await vocabulary.snapshot()
            return study, quiz, stored

    study, quiz, stored = asyncio.run(scenario())
    assert study.status == StudyStatus.COMPLETED
    assert stored.find_word("w3").is_starred is True
    assert quiz.status == QuizStatus.FINISHED
    assert quiz.score == 1


def test_quiz_accepts_q_as_an_answer(test_settings):
    async def scenario():
        async with cli.open_vocabulary(test_settings) as vocabulary:
            await vocabulary.add_word("queue", "q")
            return await cli.run_quiz(vocabulary, Selection(), _scripted(["q"]))

    quiz = asyncio.run(scenario())
    assert quiz.status == QuizStatus.FINISHED
    assert quiz.score == 1


def test_quiz_quits_on_command(test_settings):
    async def scenario():
        async with cli.open_vocabulary(test_settings) as vocabulary:
            await vocabulary.add_word("queue", "q")
            return await cli.run_quiz(vocabulary, Selection(), _scripted([":q"]))

    quiz = asyncio.run(scenario())
    assert quiz.results == []
    assert quiz.status == QuizStatus.IN_PROGRESS


def test_quiz_stops_at_end_of_input(test_settings, dataset):
    async def scenario():
        async with cli.open_vocabulary(test_settings) as vocabulary:
            await vocabulary.import_document(dataset.to_document(), confirmed=True)
            return await cli.run_quiz(vocabulary, Selection(), _end_of_input)

    quiz = asyncio.run(scenario())
    assert quiz.results == []
    assert quiz.status == QuizStatus.IN_PROGRESS
