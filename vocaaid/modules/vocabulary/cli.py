from __future__ import annotations

import argparse
import asyncio
import json
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, Callable, Optional

from vocaaid.core.config import Settings, SyncSettings, settings as default_settings
from vocaaid.core.db.base import build_engine, build_session_maker, create_tables
from vocaaid.core.errors import InvalidImportError, VocaAidError
from vocaaid.modules.notion.mirror import OfflineMirror
from vocaaid.modules.sessions.quiz import QuizSession, QuizStatus
from vocaaid.modules.sessions.study import StudySession, StudyStatus
from vocaaid.modules.vocabulary.models import Selection, SelectionKind
from vocaaid.modules.vocabulary.service import VocabularyService
from vocaaid.modules.vocabulary.store import DatasetStore
from vocaaid.modules.vocabulary.transfer import build_export, export_filename

QUIT_KEYS = ("q", "Q")
# typed at the answer prompt; end of input also quits
QUIZ_QUIT = ":q"

Prompt = Callable[[str], str]


@asynccontextmanager
async def open_vocabulary(settings: Settings) -> AsyncIterator[VocabularyService]:
    """Service over the configured store; the CLI never talks to the mirror."""
    engine = build_engine(settings.storage)
    try:
        await create_tables(engine)
        store = DatasetStore(
            build_session_maker(engine),
            key=settings.storage.key,
            legacy_key=settings.storage.legacy_key,
        )
        vocabulary = VocabularyService(
            store, OfflineMirror(), sync=SyncSettings(SYNC_START_ONLINE=False)
        )
        try:
            yield vocabulary
        finally:
            await vocabulary.aclose()
    finally:
        await engine.dispose()


def _selection(args: argparse.Namespace) -> Selection:
    if args.folder:
        return Selection.folder(args.folder)
    if args.starred:
        return Selection(kind=SelectionKind.STARRED)
    if args.unassigned:
        return Selection(kind=SelectionKind.UNASSIGNED)
    return Selection()


def _add_selection_args(p: argparse.ArgumentParser) -> None:
    group = p.add_mutually_exclusive_group()
    group.add_argument("--folder", help="Only words in this folder id")
    group.add_argument("--starred", action="store_true", help="Only starred words")
    group.add_argument(
        "--unassigned", action="store_true", help="Only words without a folder"
    )


async def _export(vocabulary: VocabularyService, out: Optional[str]) -> int:
    path = Path(out or export_filename())
    document = build_export(await vocabulary.snapshot())
    path.write_text(json.dumps(document, ensure_ascii=False, indent=2), encoding="utf-8")
    print(f"Exported {len(document['words'])} words to {path}")
    return 0


async def _import(vocabulary: VocabularyService, file: str, confirmed: bool) -> int:
    try:
        document = json.loads(Path(file).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise InvalidImportError(f"Could not read {file}: {e}") from e
    dataset = await vocabulary.import_document(document, confirmed=confirmed)
    print(f"Imported {len(dataset.folders)} folders and {len(dataset.words)} words")
    return 0


async def _list(vocabulary: VocabularyService, selection: Selection, query: str) -> int:
    dataset = await vocabulary.snapshot()
    names = {f.id: f.name for f in dataset.folders}
    words = await vocabulary.list_words(selection, query)
    for w in words:
        star = "*" if w.is_starred else " "
        meaning = w.korean if not w.korean2 else f"{w.korean} / {w.korean2}"
        folder = names.get(w.folder_id, "-") if w.folder_id else "-"
        print(f"{star} {w.english}\t{meaning}\t[{folder}]")
    print(f"{len(words)} words")
    return 0


async def run_study(
    vocabulary: VocabularyService, selection: Selection, prompt: Prompt = input
) -> StudySession:
    session = StudySession()
    session.start(await vocabulary.snapshot(), selection)
    while session.status == StudyStatus.IN_PROGRESS:
        word = session.current
        header = f"[{session.index + 1}/{session.total}]{' *' if word.is_starred else ''}"
        if session.revealed:
            extra = f" / {word.korean2}" if word.korean2 else ""
            print(f"{header} {word.english} -> {word.korean}{extra}")
        else:
            print(f"{header} {word.english}")
        try:
            key = prompt("(Enter: flip/next, s: star, q: quit) ").strip()
        except EOFError:
            break
        if key in QUIT_KEYS:
            break
        starred = session.press(key or " ")
        if starred is not None:
            await vocabulary.set_star(starred.id, starred.is_starred)
    if session.status == StudyStatus.COMPLETED:
        print(f"Studied all {session.total} words")
    return session


async def run_quiz(
    vocabulary: VocabularyService, selection: Selection, prompt: Prompt = input
) -> QuizSession:
    quiz = QuizSession()
    quiz.start(await vocabulary.snapshot(), selection)
    while quiz.status == QuizStatus.IN_PROGRESS:
        word = quiz.current
        try:
            answer = prompt(f"[{quiz.index + 1}/{quiz.total}] {word.english}: ").strip()
        except EOFError:
            break
        if answer == QUIZ_QUIT:
            break
        result = quiz.submit(answer)
        if result is None:
            continue
        if result.is_correct:
            print("Correct")
        else:
            print(f"Wrong, answer: {word.korean}")
        quiz.advance()
    correct, incorrect = quiz.summary()
    print(f"Score: {len(correct)}/{quiz.total}")
    for r in incorrect:
        print(f"  {r.word.english}: {r.user_answer} (answer: {r.word.korean})")
    return quiz


async def _run(args: argparse.Namespace, settings: Settings) -> int:
    async with open_vocabulary(settings) as vocabulary:
        if args.cmd == "export":
            return await _export(vocabulary, args.out)
        if args.cmd == "import":
            return await _import(vocabulary, args.file, args.yes)
        if args.cmd == "list":
            return await _list(vocabulary, _selection(args), args.search or "")
        if args.cmd == "study":
            await run_study(vocabulary, _selection(args))
            return 0
        if args.cmd == "quiz":
            await run_quiz(vocabulary, _selection(args))
            return 0
    return 2


def main(argv: list[str] | None = None, settings: Optional[Settings] = None) -> int:
    parser = argparse.ArgumentParser(prog="vocaaid", description="VocaAid word book CLI")
    sub = parser.add_subparsers(dest="cmd", required=True)

    e = sub.add_parser("export", help="Write a sanitized export file")
    e.add_argument("--out", "-o", help="Output path (default vocab_data_<date>.json)")

    i = sub.add_parser("import", help="Replace the word book with an export file")
    i.add_argument("file", help="Path to an exported JSON document")
    i.add_argument("--yes", action="store_true", help="Confirm the overwrite")

    ls = sub.add_parser("list", help="List words")
    _add_selection_args(ls)
    ls.add_argument("--search", "-s", help="Case-insensitive text filter")

    st = sub.add_parser("study", help="Flip-card study in the terminal")
    _add_selection_args(st)

    qz = sub.add_parser("quiz", help="Type-the-answer quiz in the terminal (:q quits)")
    _add_selection_args(qz)

    args = parser.parse_args(argv)
    try:
        return asyncio.run(_run(args, settings or default_settings))
    except VocaAidError as e:
        print(f"Error: {e.message}")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
