from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Callable, Generic, TypeVar


@dataclass(frozen=True)
class EntryTarget:
    section_idx: int
    entry_idx: int


@dataclass(frozen=True)
class SectionTarget:
    section_idx: int


T = TypeVar("T", EntryTarget, SectionTarget)


class RemovalSlot(Generic[T]):
    """One pending destructive action: Idle -> PendingConfirm -> Idle.

    ``validate`` runs on request and must raise for a target that does not
    exist; ``apply`` performs the removal on confirm.
    """

    def __init__(self, validate: Callable[[T], None], apply: Callable[[T], None]) -> None:
        self._validate = validate
        self._apply = apply
        self.pending: T | None = None
        self.dialog_open = False

    @property
    def is_pending(self) -> bool:
        return self.pending is not None

    def request(self, target: T) -> None:
        self._validate(target)
        self.pending = target
        self.dialog_open = True

    def confirm(self) -> bool:
        target = self.pending
        if target is None:
            return False
        try:
            self._apply(target)
        finally:
            self.clear()
        return True

    def cancel(self) -> None:
        self.clear()

    def clear(self) -> None:
        self.pending = None
        self.dialog_open = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "dialog_open": self.dialog_open,
            "target": asdict(self.pending) if self.pending is not None else None,
        }


class ConfirmationGate:
    """Entry and section removals, each behind its own confirm/cancel dialog.

    The two slots are independent and may both be pending. Confirming a
    section removal re-aims a pending entry removal so it keeps pointing at
    the same entry, or drops it when its section is the one removed.
    """

    def __init__(
        self,
        *,
        validate_entry: Callable[[EntryTarget], None],
        remove_entry: Callable[[EntryTarget], None],
        validate_section: Callable[[SectionTarget], None],
        remove_section: Callable[[SectionTarget], None],
    ) -> None:
        self.entry: RemovalSlot[EntryTarget] = RemovalSlot(validate_entry, remove_entry)
        self.section: RemovalSlot[SectionTarget] = RemovalSlot(validate_section, remove_section)

    def request_entry_removal(self, section_idx: int, entry_idx: int) -> EntryTarget:
        target = EntryTarget(section_idx, entry_idx)
        self.entry.request(target)
        return target

    def confirm_entry_removal(self) -> bool:
        return self.entry.confirm()

    def cancel_entry_removal(self) -> None:
        self.entry.cancel()

    def request_section_removal(self, section_idx: int) -> SectionTarget:
        target = SectionTarget(section_idx)
        self.section.request(target)
        return target

    def confirm_section_removal(self) -> bool:
        target = self.section.pending
        if target is None:
            return False
        self.section.confirm()
        self._section_removed(target.section_idx)
        return True

    def cancel_section_removal(self) -> None:
        self.section.cancel()

    def _section_removed(self, removed_idx: int) -> None:
        pending = self.entry.pending
        if pending is None or pending.section_idx < removed_idx:
            return
        if pending.section_idx == removed_idx:
            self.entry.clear()
            return
        self.entry.pending = EntryTarget(pending.section_idx - 1, pending.entry_idx)

    def reset(self) -> None:
        self.entry.clear()
        self.section.clear()

    def to_dict(self) -> dict[str, Any]:
        return {"entry": self.entry.to_dict(), "section": self.section.to_dict()}
