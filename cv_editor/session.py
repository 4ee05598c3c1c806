from __future__ import annotations

import threading
from typing import Any

from . import document as store
from .collapse import SectionCollapseTracker
from .confirmation import ConfirmationGate, EntryTarget, SectionTarget
from .document import CVDocument
from .errors import NoDocumentError, ParseError
from .logger import get_logger
from .serializer import ExportFile, export_file, parse, to_dict

logger = get_logger(__name__)


class EditorSession:
    """Owns the current document together with its collapse flags and pending removals.

    Every public method is one UI event. The document is only ever swapped for
    a new value, and section inserts/removals update the collapse flags while
    the lock is held, so the two never disagree on length.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._document: CVDocument | None = None
        self.collapse = SectionCollapseTracker()
        self.gate = ConfirmationGate(
            validate_entry=self._validate_entry,
            remove_entry=self._remove_entry,
            validate_section=self._validate_section,
            remove_section=self._remove_section,
        )

    @property
    def document(self) -> CVDocument | None:
        return self._document

    @property
    def has_document(self) -> bool:
        return self._document is not None

    def _require(self) -> CVDocument:
        if self._document is None:
            raise NoDocumentError()
        return self._document

    def _adopt(self, doc: CVDocument) -> None:
        self._document = doc
        self.collapse.reset(len(doc.sections))
        self.gate.reset()

    def create_new(self) -> CVDocument:
        with self._lock:
            self._adopt(store.create_empty())
            logger.info("Created new CV with %d default sections", len(self.collapse))
            return self._require()

    def import_text(self, text: str | bytes) -> CVDocument:
        # Parse before taking the lock; a failed import leaves the current document alone.
        try:
            doc = parse(text)
        except ParseError as exc:
            logger.warning("Import rejected: %s", exc)
            raise
        with self._lock:
            self._adopt(doc)
            logger.info("Imported CV with %d sections", len(doc.sections))
            return doc

    def set_personal_field(self, field_name: str, value: str) -> CVDocument:
        with self._lock:
            self._document = store.set_personal_field(self._require(), field_name, value)
            logger.debug("Set personal field %s", field_name)
            return self._document

    def add_section(self) -> CVDocument:
        with self._lock:
            self._document = store.add_section(self._require())
            self.collapse.append()
            logger.info("Added section %d", len(self._document.sections) - 1)
            return self._document

    def rename_section(self, section_idx: int, name: str) -> CVDocument:
        with self._lock:
            self._document = store.rename_section(self._require(), section_idx, name)
            logger.debug("Renamed section %d", section_idx)
            return self._document

    def toggle_section(self, section_idx: int) -> bool:
        with self._lock:
            self._require()
            return self.collapse.toggle(section_idx)

    def add_entry(self, section_idx: int) -> CVDocument:
        with self._lock:
            self._document = store.add_entry(self._require(), section_idx)
            logger.info("Added entry to section %d", section_idx)
            return self._document

    def set_entry_field(self, section_idx: int, entry_idx: int, field_name: str, value: str) -> CVDocument:
        with self._lock:
            self._document = store.set_entry_field(self._require(), section_idx, entry_idx, field_name, value)
            logger.debug("Set field %s on entry %d/%d", field_name, section_idx, entry_idx)
            return self._document

    def request_entry_removal(self, section_idx: int, entry_idx: int) -> EntryTarget:
        with self._lock:
            return self.gate.request_entry_removal(section_idx, entry_idx)

    def confirm_entry_removal(self) -> bool:
        with self._lock:
            return self.gate.confirm_entry_removal()

    def cancel_entry_removal(self) -> None:
        with self._lock:
            self.gate.cancel_entry_removal()

    def request_section_removal(self, section_idx: int) -> SectionTarget:
        with self._lock:
            return self.gate.request_section_removal(section_idx)

    def confirm_section_removal(self) -> bool:
        with self._lock:
            return self.gate.confirm_section_removal()

    def cancel_section_removal(self) -> None:
        with self._lock:
            self.gate.cancel_section_removal()

    def _validate_entry(self, target: EntryTarget) -> None:
        store.get_entry(self._require(), target.section_idx, target.entry_idx)

    def _remove_entry(self, target: EntryTarget) -> None:
        self._document = store.remove_entry_at(self._require(), target.section_idx, target.entry_idx)
        logger.info("Removed entry %d from section %d", target.entry_idx, target.section_idx)

    def _validate_section(self, target: SectionTarget) -> None:
        store.get_section(self._require(), target.section_idx)

    def _remove_section(self, target: SectionTarget) -> None:
        doc = store.remove_section_at(self._require(), target.section_idx)
        self.collapse.remove(target.section_idx)
        self._document = doc
        logger.info("Removed section %d", target.section_idx)

    def export(self) -> ExportFile:
        with self._lock:
            return export_file(self._require())

    def view(self) -> dict[str, Any]:
        with self._lock:
            return {
                "document": to_dict(self._document) if self._document is not None else None,
                "collapsed": self.collapse.as_list(),
                "pending": self.gate.to_dict(),
            }
