from __future__ import annotations

from typing import Iterator

from .errors import IndexOutOfRange


class SectionCollapseTracker:
    """Per-section collapsed flags, index-aligned with ``CVDocument.sections``.

    New sections start collapsed. The owner keeps the length in step with the
    document: ``reset`` after a create/import, ``append`` after adding a
    section and ``remove`` in the same step as removing one.
    """

    def __init__(self, count: int = 0) -> None:
        self._states: list[bool] = [True] * count

    def __len__(self) -> int:
        return len(self._states)

    def __iter__(self) -> Iterator[bool]:
        return iter(list(self._states))

    def __repr__(self) -> str:
        return f"SectionCollapseTracker({self._states!r})"

    def _check(self, idx: int) -> int:
        if isinstance(idx, bool) or not isinstance(idx, int):
            raise TypeError(f"Section index must be an integer, got {type(idx).__name__}.")
        if not 0 <= idx < len(self._states):
            raise IndexOutOfRange("Section", idx, len(self._states))
        return idx

    def reset(self, count: int) -> None:
        self._states = [True] * count

    def append(self) -> None:
        self._states.append(True)

    def toggle(self, idx: int) -> bool:
        idx = self._check(idx)
        self._states[idx] = not self._states[idx]
        return self._states[idx]

    def remove(self, idx: int) -> None:
        del self._states[self._check(idx)]

    def is_collapsed(self, idx: int) -> bool:
        return self._states[self._check(idx)]

    def as_list(self) -> list[bool]:
        return list(self._states)
