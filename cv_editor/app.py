# Run locally with: pip install -e . && python -m cv_editor.app
from __future__ import annotations

from io import BytesIO
from pathlib import Path
from typing import Any

from flask import Flask, current_app, jsonify, render_template, request, send_file
from werkzeug.exceptions import RequestEntityTooLarge

from .config import Settings, load_settings
from .errors import (
    CVEditorError,
    IndexOutOfRange,
    NoDocumentError,
    ParseError,
    UnknownFieldError,
)
from .logger import get_logger, setup_logging
from .serializer import check_import_name
from .session import EditorSession


BASE_DIR = Path(__file__).resolve().parent
EXTENSION_KEY = "cv_editor"

logger = get_logger(__name__)

app = Flask(
    __name__,
    template_folder=str(BASE_DIR / "templates"),
)


def configure_app(flask_app: Flask, settings: Settings | None = None) -> Flask:
    settings = settings or Settings()
    flask_app.config.update(settings.flask_config())
    flask_app.config["CV_EDITOR_SETTINGS"] = settings
    flask_app.extensions[EXTENSION_KEY] = EditorSession()
    return flask_app


configure_app(app)


def _session() -> EditorSession:
    return current_app.extensions[EXTENSION_KEY]


def _json_error(message: str, status: int = 400, **extra: Any):
    payload: dict[str, Any] = {"error": message}
    payload.update(extra)
    return jsonify(payload), status


def _view(**extra: Any):
    payload = _session().view()
    payload.update(extra)
    return jsonify(payload)


def _json_object() -> dict[str, Any] | None:
    payload = request.get_json(silent=True)
    return payload if isinstance(payload, dict) else None


def _string_field(payload: dict[str, Any], key: str) -> str | None:
    value = payload.get(key)
    return value if isinstance(value, str) else None


_ERROR_STATUS: list[tuple[type[CVEditorError], int]] = [
    (ParseError, 400),
    (UnknownFieldError, 400),
    (IndexOutOfRange, 404),
    (NoDocumentError, 409),
]


@app.errorhandler(CVEditorError)
def _handle_editor_error(exc: CVEditorError):
    status = next((code for kind, code in _ERROR_STATUS if isinstance(exc, kind)), 500)
    return _json_error(str(exc), status, kind=exc.kind)


@app.errorhandler(RequestEntityTooLarge)
def _handle_too_large(exc: RequestEntityTooLarge):
    return _json_error("Uploaded file is too large.", 413, kind="too_large")


@app.route("/")
def index() -> str:
    return render_template("index.html")


@app.route("/health", methods=["GET"])
def healthcheck():
    return jsonify({"status": "ok", "has_document": _session().has_document})


@app.route("/api/state", methods=["GET"])
def api_get_state():
    return _view()


@app.route("/api/new", methods=["POST"])
def api_new():
    _session().create_new()
    return _view(status="ok")


@app.route("/api/import", methods=["POST"])
def api_import():
    if request.mimetype == "multipart/form-data":
        upload = request.files.get("file")
        if upload is None:
            return _json_error("Expected a `file` field in the upload.", 400, kind="empty_import")
        check_import_name(upload.filename)
        raw = upload.read()
    else:
        # Read the body as-is; touching request.files would parse form bodies away.
        raw = request.get_data(cache=False)
    if not raw:
        return _json_error("Expected a .json file upload or a JSON request body.", 400, kind="empty_import")
    _session().import_text(raw)
    return _view(status="ok")


@app.route("/api/export", methods=["GET"])
def api_export():
    exported = _session().export()
    return send_file(
        BytesIO(exported.content),
        mimetype=exported.mimetype,
        as_attachment=True,
        download_name=exported.filename,
    )


@app.route("/api/personal", methods=["POST"])
def api_set_personal():
    payload = _json_object()
    if payload is None:
        return _json_error("Expected a JSON object.", 400)
    field_name = _string_field(payload, "field")
    value = _string_field(payload, "value")
    if field_name is None or value is None:
        return _json_error("Expected string `field` and `value`.", 400)
    _session().set_personal_field(field_name, value)
    return _view(status="ok")


@app.route("/api/sections", methods=["POST"])
def api_add_section():
    _session().add_section()
    return _view(status="ok")


@app.route("/api/sections/<int:section_idx>/name", methods=["POST"])
def api_rename_section(section_idx: int):
    payload = _json_object()
    if payload is None:
        return _json_error("Expected a JSON object.", 400)
    name = _string_field(payload, "name")
    if name is None:
        return _json_error("Expected a string `name`.", 400)
    _session().rename_section(section_idx, name)
    return _view(status="ok")


@app.route("/api/sections/<int:section_idx>/toggle", methods=["POST"])
def api_toggle_section(section_idx: int):
    collapsed = _session().toggle_section(section_idx)
    return _view(status="ok", section_collapsed=collapsed)


@app.route("/api/sections/<int:section_idx>/entries", methods=["POST"])
def api_add_entry(section_idx: int):
    _session().add_entry(section_idx)
    return _view(status="ok")


@app.route("/api/sections/<int:section_idx>/entries/<int:entry_idx>", methods=["POST"])
def api_set_entry_field(section_idx: int, entry_idx: int):
    payload = _json_object()
    if payload is None:
        return _json_error("Expected a JSON object.", 400)
    field_name = _string_field(payload, "field")
    value = _string_field(payload, "value")
    if not field_name or value is None:
        return _json_error("Expected a non-empty string `field` and a string `value`.", 400)
    _session().set_entry_field(section_idx, entry_idx, field_name, value)
    return _view(status="ok")


@app.route("/api/sections/<int:section_idx>/remove", methods=["POST"])
def api_request_section_removal(section_idx: int):
    _session().request_section_removal(section_idx)
    return _view(status="pending")


@app.route("/api/sections/<int:section_idx>/entries/<int:entry_idx>/remove", methods=["POST"])
def api_request_entry_removal(section_idx: int, entry_idx: int):
    _session().request_entry_removal(section_idx, entry_idx)
    return _view(status="pending")


@app.route("/api/confirm/section", methods=["POST"])
def api_confirm_section_removal():
    removed = _session().confirm_section_removal()
    return _view(status="ok", removed=removed)


@app.route("/api/cancel/section", methods=["POST"])
def api_cancel_section_removal():
    _session().cancel_section_removal()
    return _view(status="ok")


@app.route("/api/confirm/entry", methods=["POST"])
def api_confirm_entry_removal():
    removed = _session().confirm_entry_removal()
    return _view(status="ok", removed=removed)


@app.route("/api/cancel/entry", methods=["POST"])
def api_cancel_entry_removal():
    _session().cancel_entry_removal()
    return _view(status="ok")


def main(config_path: str | None = None) -> None:
    settings = load_settings(config_path)
    setup_logging(settings.log_level, settings.log_file)
    configure_app(app, settings)
    logger.info("Serving CV editor on http://%s:%d", settings.host, settings.port)
    app.run(host=settings.host, port=settings.port, debug=settings.debug)


if __name__ == "__main__":
    main()
