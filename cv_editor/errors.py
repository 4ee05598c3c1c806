from __future__ import annotations


class CVEditorError(Exception):
    """Base class for every error raised by the editor core."""

    kind = "error"


class ParseError(CVEditorError):
    """Import text is not valid JSON."""

    kind = "parse_error"


class InvalidDocumentError(ParseError):
    """Valid JSON whose shape cannot be mapped onto a CV document."""

    kind = "invalid_document"


class UnsupportedFileError(ParseError):
    kind = "unsupported_file"


class IndexOutOfRange(CVEditorError, IndexError):
    kind = "index_out_of_range"

    def __init__(self, what: str, index: int, size: int) -> None:
        super().__init__(f"{what} index {index} is out of range (have {size}).")
        self.what = what
        self.index = index
        self.size = size


class UnknownFieldError(CVEditorError, KeyError):
    kind = "unknown_field"

    def __init__(self, field: str) -> None:
        super().__init__(field)
        self.field = field

    def __str__(self) -> str:
        return f"Unknown personal field: {self.field!r}."


class NoDocumentError(CVEditorError):
    kind = "no_document"

    def __init__(self) -> None:
        super().__init__("No CV loaded. Create a new CV or import a JSON file first.")


class ConfigError(CVEditorError):
    kind = "config_error"
