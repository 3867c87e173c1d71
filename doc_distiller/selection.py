# doc_distiller/selection.py
from __future__ import annotations

from typing import Iterable, List

from .extractor import SelectedFile


class SelectionStore:
    """
    Ordered set of pending files, keyed by file name.

    Position is the only handle callers get; indices shift after every
    removal.
    """

    def __init__(self) -> None:
        self._files: List[SelectedFile] = []

    def add(self, files: Iterable[SelectedFile]) -> List[SelectedFile]:
        """Append files whose name is not taken yet; return the ones added."""
        seen = set(self.names())
        added: List[SelectedFile] = []
        for f in files:
            if f.name in seen:
                continue
            seen.add(f.name)
            self._files.append(f)
            added.append(f)
        return added

    def remove_at(self, index: int) -> SelectedFile:
        if not 0 <= index < len(self._files):
            raise IndexError(f"no file at position {index} (have {len(self._files)})")
        return self._files.pop(index)

    def list(self) -> List[SelectedFile]:
        return list(self._files)

    def names(self) -> List[str]:
        return [f.name for f in self._files]

    def clear(self) -> None:
        self._files.clear()

    def __len__(self) -> int:
        return len(self._files)

    def __bool__(self) -> bool:
        return bool(self._files)
