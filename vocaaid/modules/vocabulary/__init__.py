"""Vocabulary module exports."""

from .models import Dataset, Folder, Selection, SelectionKind, Word

__all__ = [
    "Dataset",
    "Folder",
    "Selection",
    "SelectionKind",
    "Word",
]
