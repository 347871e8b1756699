"""Translation between ``Word`` and Notion database page properties.

Database columns: ``English`` (title), ``Korean``, ``Korean2``, ``FolderId``
(rich text) and ``IsStarred`` (checkbox).
"""

from __future__ import annotations

from typing import Any, Optional

from vocaaid.modules.vocabulary.models import Word


def _plain_text(prop: Optional[dict], kind: str) -> Optional[str]:
    if not prop:
        return None
    parts = prop.get(kind) or []
    if not parts:
        return None
    first = parts[0] or {}
    text = (first.get("text") or {}).get("content")
    if text is None:
        text = first.get("plain_text")
    return text


def _rich_text(content: str) -> dict[str, Any]:
    return {"rich_text": [{"text": {"content": content}}]}


def page_to_word(page: dict[str, Any]) -> Word:
    props = page.get("properties") or {}
    page_id = page["id"]
    return Word(
        id=page_id,
        english=_plain_text(props.get("English"), "title") or "",
        korean=_plain_text(props.get("Korean"), "rich_text") or "",
        korean2=_plain_text(props.get("Korean2"), "rich_text"),
        folder_id=_plain_text(props.get("FolderId"), "rich_text") or None,
        is_starred=bool((props.get("IsStarred") or {}).get("checkbox", False)),
        remote_id=page_id,
    )


def word_to_properties(word: Word) -> dict[str, Any]:
    props: dict[str, Any] = {
        "English": {"title": [{"text": {"content": word.english}}]},
        "Korean": _rich_text(word.korean),
        "IsStarred": {"checkbox": bool(word.is_starred)},
    }
    if word.korean2:
        props["Korean2"] = _rich_text(word.korean2)
    if word.folder_id:
        props["FolderId"] = _rich_text(word.folder_id)
    return props
