from __future__ import annotations

import json
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, Mapping

from .errors import IndexOutOfRange, InvalidDocumentError, ParseError, UnknownFieldError


PERSONAL_FIELDS = ("name", "email", "address", "phone")
ENTRY_FIELDS = ("title", "date", "institution", "notes")
DEFAULT_SECTIONS = ("Education", "Work Experience", "Skills")
NEW_SECTION_NAME = "New Section"

Entry = Mapping[str, str]


def _frozen(data: Mapping[str, Any] | None = None) -> Mapping[str, Any]:
    return MappingProxyType(dict(data or {}))


@dataclass(frozen=True)
class Section:
    name: str
    entries: tuple[Entry, ...] = ()
    extra: Mapping[str, Any] = field(default_factory=_frozen)

    # Entries and extras are mapping proxies, which cannot be hashed.
    __hash__ = None  # type: ignore[assignment]


@dataclass(frozen=True)
class CVDocument:
    """Immutable CV value. Every operation below returns a new instance.

    Compared by value but not hashable.
    """

    name: str = ""
    email: str = ""
    address: str = ""
    phone: str = ""
    sections: tuple[Section, ...] = ()
    extra: Mapping[str, Any] = field(default_factory=_frozen)

    __hash__ = None  # type: ignore[assignment]


def _check_index(what: str, index: int, size: int) -> int:
    if isinstance(index, bool) or not isinstance(index, int):
        raise TypeError(f"{what} index must be an integer, got {type(index).__name__}.")
    # Negative indices would silently address elements from the end.
    if not 0 <= index < size:
        raise IndexOutOfRange(what, index, size)
    return index


def _check_text(label: str, value: Any) -> str:
    if not isinstance(value, str):
        raise TypeError(f"{label} must be a string, got {type(value).__name__}.")
    return value


def _section(doc: CVDocument, section_idx: int) -> Section:
    return doc.sections[_check_index("Section", section_idx, len(doc.sections))]


def _with_section(doc: CVDocument, section_idx: int, section: Section) -> CVDocument:
    sections = list(doc.sections)
    sections[section_idx] = section
    return replace(doc, sections=tuple(sections))


def create_empty() -> CVDocument:
    return CVDocument(sections=tuple(Section(name=title) for title in DEFAULT_SECTIONS))


def new_entry() -> Entry:
    return MappingProxyType({key: "" for key in ENTRY_FIELDS})


def personal_fields(doc: CVDocument) -> dict[str, str]:
    return {key: getattr(doc, key) for key in PERSONAL_FIELDS}


def get_section(doc: CVDocument, section_idx: int) -> Section:
    return _section(doc, section_idx)


def get_entry(doc: CVDocument, section_idx: int, entry_idx: int) -> Entry:
    entries = _section(doc, section_idx).entries
    return entries[_check_index("Entry", entry_idx, len(entries))]


def entry_count(doc: CVDocument, section_idx: int) -> int:
    return len(_section(doc, section_idx).entries)


def set_personal_field(doc: CVDocument, field_name: str, value: str) -> CVDocument:
    if field_name not in PERSONAL_FIELDS:
        raise UnknownFieldError(field_name)
    return replace(doc, **{field_name: _check_text(field_name, value)})


def add_section(doc: CVDocument) -> CVDocument:
    return replace(doc, sections=doc.sections + (Section(name=NEW_SECTION_NAME),))


def rename_section(doc: CVDocument, section_idx: int, name: str) -> CVDocument:
    section = _section(doc, section_idx)
    return _with_section(doc, section_idx, replace(section, name=_check_text("Section name", name)))


def remove_section_at(doc: CVDocument, section_idx: int) -> CVDocument:
    _check_index("Section", section_idx, len(doc.sections))
    return replace(doc, sections=doc.sections[:section_idx] + doc.sections[section_idx + 1 :])


def add_entry(doc: CVDocument, section_idx: int) -> CVDocument:
    section = _section(doc, section_idx)
    return _with_section(doc, section_idx, replace(section, entries=section.entries + (new_entry(),)))


def set_entry_field(
    doc: CVDocument, section_idx: int, entry_idx: int, field_name: str, value: str
) -> CVDocument:
    section = _section(doc, section_idx)
    _check_index("Entry", entry_idx, len(section.entries))
    _check_text("Entry field name", field_name)
    # Entries are open maps: existing keys keep their position, new keys go last.
    updated = dict(section.entries[entry_idx])
    updated[field_name] = _check_text(field_name, value)
    entries = list(section.entries)
    entries[entry_idx] = MappingProxyType(updated)
    return _with_section(doc, section_idx, replace(section, entries=tuple(entries)))


def remove_entry_at(doc: CVDocument, section_idx: int, entry_idx: int) -> CVDocument:
    section = _section(doc, section_idx)
    _check_index("Entry", entry_idx, len(section.entries))
    entries = section.entries[:entry_idx] + section.entries[entry_idx + 1 :]
    return _with_section(doc, section_idx, replace(section, entries=entries))


def _reject_constant(token: str) -> Any:
    raise ValueError(f"{token} is not valid JSON")


def _loads(text: str) -> Any:
    try:
        return json.loads(text, parse_constant=_reject_constant)
    except RecursionError as exc:
        raise InvalidDocumentError("JSON is nested too deeply to be a CV file.") from exc
    except ValueError as exc:
        raise ParseError(f"Error parsing JSON file: {exc}") from exc


def _as_text(value: Any, where: str) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, (bool, int, float)):
        return json.dumps(value)
    raise InvalidDocumentError(f"{where} must be a string, got {type(value).__name__}.")


def _entry_from_data(data: Any, where: str) -> Entry:
    if not isinstance(data, dict):
        raise InvalidDocumentError(f"{where} must be an object.")
    return MappingProxyType({str(key): _as_text(value, f"{where}.{key}") for key, value in data.items()})


def _section_from_data(data: Any, where: str) -> Section:
    if not isinstance(data, dict):
        raise InvalidDocumentError(f"{where} must be an object.")
    entries_raw = data.get("entries")
    if entries_raw is None:
        entries_raw = []
    if not isinstance(entries_raw, list):
        raise InvalidDocumentError(f"{where}.entries must be a list.")
    entries = tuple(_entry_from_data(item, f"{where}.entries[{idx}]") for idx, item in enumerate(entries_raw))
    extra = {key: value for key, value in data.items() if key not in ("name", "entries")}
    return Section(name=_as_text(data.get("name"), f"{where}.name"), entries=entries, extra=_frozen(extra))


def from_data(data: Any) -> CVDocument:
    """Adopt an already-decoded JSON value as a document.

    Missing fields fall back to empty values; shapes that cannot be represented
    raise InvalidDocumentError.
    """
    if not isinstance(data, dict):
        raise InvalidDocumentError("A CV file must contain a JSON object at the top level.")
    sections_raw = data.get("sections")
    if sections_raw is None:
        sections_raw = []
    if not isinstance(sections_raw, list):
        raise InvalidDocumentError("`sections` must be a list.")
    sections = tuple(_section_from_data(item, f"sections[{idx}]") for idx, item in enumerate(sections_raw))
    personal = {key: _as_text(data.get(key), key) for key in PERSONAL_FIELDS}
    extra = {key: value for key, value in data.items() if key not in PERSONAL_FIELDS and key != "sections"}
    return CVDocument(sections=sections, extra=_frozen(extra), **personal)


def load(text: str) -> CVDocument:
    return from_data(_loads(text))
