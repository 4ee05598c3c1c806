from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .document import PERSONAL_FIELDS, CVDocument, Section, load
from .errors import ParseError, UnsupportedFileError


EXPORT_FILENAME = "updated_cv.json"
EXPORT_MIMETYPE = "application/json"
ALLOWED_IMPORT_EXTS = {".json"}


@dataclass(frozen=True)
class ExportFile:
    filename: str
    mimetype: str
    content: bytes


def _section_to_dict(section: Section) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "name": section.name,
        "entries": [dict(entry) for entry in section.entries],
    }
    for key, value in section.extra.items():
        payload.setdefault(key, value)
    return payload


def to_dict(doc: CVDocument) -> dict[str, Any]:
    """Plain JSON-ready mapping in export key order."""
    payload: dict[str, Any] = {key: getattr(doc, key) for key in PERSONAL_FIELDS}
    payload["sections"] = [_section_to_dict(section) for section in doc.sections]
    for key, value in doc.extra.items():
        payload.setdefault(key, value)
    return payload


def dumps(doc: CVDocument) -> str:
    return json.dumps(to_dict(doc), ensure_ascii=False, indent=2)


def parse(text: str | bytes) -> CVDocument:
    if isinstance(text, (bytes, bytearray)):
        try:
            text = bytes(text).decode("utf-8-sig")
        except UnicodeDecodeError as exc:
            raise ParseError(f"File is not valid UTF-8 text: {exc}") from exc
    return load(text)


def export_file(doc: CVDocument) -> ExportFile:
    return ExportFile(
        filename=EXPORT_FILENAME,
        mimetype=EXPORT_MIMETYPE,
        content=dumps(doc).encode("utf-8"),
    )


def check_import_name(filename: str | None) -> None:
    suffix = Path(filename or "").suffix.lower()
    if suffix not in ALLOWED_IMPORT_EXTS:
        raise UnsupportedFileError(f"Expected a .json file, got {filename or 'no file name'!r}.")


def read_file(path: Path) -> CVDocument:
    check_import_name(path.name)
    return parse(path.read_bytes())


def write_file(doc: CVDocument, path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(dumps(doc), encoding="utf-8")
    return path
