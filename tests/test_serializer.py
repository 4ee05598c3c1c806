import json

import pytest

from cv_editor import document as store
from cv_editor import serializer
from cv_editor.errors import ParseError, UnsupportedFileError


def test_round_trip_after_edits(sample_doc):
    doc = store.add_section(sample_doc)
    doc = store.add_entry(doc, 3)
    doc = store.set_entry_field(doc, 3, 0, "notes", "Zürich, naïve café")
    doc = store.remove_entry_at(doc, 1, 0)
    assert serializer.parse(serializer.dumps(doc)) == doc


def test_round_trip_of_empty_document():
    doc = store.create_empty()
    assert serializer.parse(serializer.dumps(doc)) == doc


def test_export_key_order(sample_doc):
    exported = json.loads(serializer.dumps(sample_doc))
    assert list(exported) == ["name", "email", "address", "phone", "sections", "website"]
    assert list(exported["sections"][2]) == ["name", "entries", "icon"]
    assert list(exported["sections"][0]["entries"][0]) == ["title", "date", "institution", "notes", "gpa"]


def test_export_uses_two_space_indent_and_keeps_unicode():
    doc = store.set_personal_field(store.create_empty(), "name", "Zoë")
    text = serializer.dumps(doc)
    assert text.startswith('{\n  "name": "Zoë",')
    assert '\n    {\n      "name": "Education",' in text


def test_export_file_metadata(sample_doc):
    exported = serializer.export_file(sample_doc)
    assert exported.filename == "updated_cv.json"
    assert exported.mimetype == "application/json"
    assert json.loads(exported.content.decode("utf-8"))["name"] == "Jane Doe"


def test_partial_import_reads_back_as_empty():
    doc = serializer.parse('{"name":"Jane","sections":[]}')
    assert json.loads(serializer.dumps(doc)) == {
        "name": "Jane",
        "email": "",
        "address": "",
        "phone": "",
        "sections": [],
    }


def test_parse_accepts_utf8_bytes_with_bom():
    doc = serializer.parse('\ufeff{"name": "Zoë"}'.encode("utf-8"))
    assert doc.name == "Zoë"


def test_parse_rejects_undecodable_bytes():
    with pytest.raises(ParseError):
        serializer.parse(b'{"name": "\xff"}')


def test_file_round_trip(tmp_path, sample_doc):
    path = serializer.write_file(sample_doc, tmp_path / "out" / "cv.json")
    assert serializer.read_file(path) == sample_doc


def test_read_file_requires_json_extension(tmp_path):
    path = tmp_path / "cv.txt"
    path.write_text("{}", encoding="utf-8")
    with pytest.raises(UnsupportedFileError):
        serializer.read_file(path)


@pytest.mark.parametrize("name", ["cv.json", "CV.JSON"])
def test_check_import_name_accepts_json(name):
    serializer.check_import_name(name)


@pytest.mark.parametrize("name", ["cv.yaml", "", None])
def test_check_import_name_rejects_other_files(name):
    with pytest.raises(UnsupportedFileError):
        serializer.check_import_name(name)
