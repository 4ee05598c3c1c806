from collections.abc import Hashable

import pytest

from cv_editor import document as store
from cv_editor import serializer
from cv_editor.errors import IndexOutOfRange, InvalidDocumentError, ParseError, UnknownFieldError


def _names(doc):
    return [section.name for section in doc.sections]


def test_create_empty_has_default_sections():
    doc = store.create_empty()
    assert _names(doc) == ["Education", "Work Experience", "Skills"]
    assert all(section.entries == () for section in doc.sections)
    assert store.personal_fields(doc) == {"name": "", "email": "", "address": "", "phone": ""}


def test_set_personal_field_returns_new_document():
    doc = store.create_empty()
    updated = store.set_personal_field(doc, "email", "jane@example.com")
    assert updated.email == "jane@example.com"
    assert doc.email == ""
    assert updated.sections == doc.sections


def test_set_personal_field_rejects_unknown_field():
    with pytest.raises(UnknownFieldError):
        store.set_personal_field(store.create_empty(), "sections", "oops")


def test_add_section_then_add_entry():
    doc = store.add_section(store.create_empty())
    doc = store.add_entry(doc, len(doc.sections) - 1)
    last = doc.sections[-1]
    assert last.name == "New Section"
    assert [dict(entry) for entry in last.entries] == [{"title": "", "date": "", "institution": "", "notes": ""}]


def test_rename_section_only_touches_target(sample_doc):
    doc = store.rename_section(sample_doc, 2, "Languages")
    assert _names(doc) == ["Education", "Work Experience", "Languages"]
    assert doc.sections[2].extra == {"icon": "star"}
    assert doc.sections[:2] == sample_doc.sections[:2]


def test_remove_section_shifts_later_sections(sample_doc):
    doc = store.remove_section_at(sample_doc, 0)
    assert _names(doc) == ["Work Experience", "Skills"]
    assert doc.sections[0] == sample_doc.sections[1]


def test_remove_entry_leaves_everything_else_unchanged(sample_doc):
    doc = store.remove_entry_at(sample_doc, 1, 0)
    assert store.entry_count(doc, 1) == store.entry_count(sample_doc, 1) - 1
    assert doc.sections[1].entries[0] == sample_doc.sections[1].entries[1]
    assert doc.sections[0] == sample_doc.sections[0]
    assert doc.sections[2] == sample_doc.sections[2]
    assert store.personal_fields(doc) == store.personal_fields(sample_doc)


def test_set_entry_field_preserves_extra_keys_and_order(sample_doc):
    doc = store.set_entry_field(sample_doc, 0, 0, "title", "MSc")
    entry = doc.sections[0].entries[0]
    assert entry["title"] == "MSc"
    assert entry["gpa"] == "3.9"
    assert list(entry) == ["title", "date", "institution", "notes", "gpa"]


def test_set_entry_field_adds_unknown_key_last(sample_doc):
    doc = store.set_entry_field(sample_doc, 1, 1, "location", "Remote")
    assert list(doc.sections[1].entries[1])[-1] == "location"
    assert "location" not in sample_doc.sections[1].entries[1]


@pytest.mark.parametrize(
    "operation",
    [
        lambda doc: store.rename_section(doc, 3, "x"),
        lambda doc: store.remove_section_at(doc, -1),
        lambda doc: store.add_entry(doc, 99),
        lambda doc: store.set_entry_field(doc, 1, 2, "title", "x"),
        lambda doc: store.remove_entry_at(doc, 2, 0),
        lambda doc: store.remove_entry_at(doc, 0, -1),
    ],
)
def test_invalid_indices_are_rejected(sample_doc, operation):
    with pytest.raises(IndexOutOfRange):
        operation(sample_doc)


def test_documents_cannot_be_edited_in_place(sample_doc):
    with pytest.raises(AttributeError):
        sample_doc.name = "Mallory"
    with pytest.raises(TypeError):
        sample_doc.sections[0].entries[0]["title"] = "Forged"


def test_load_rejects_invalid_json():
    with pytest.raises(ParseError):
        store.load("{not json")


def test_load_rejects_nan_literal():
    with pytest.raises(ParseError):
        store.load('{"name": NaN}')


def test_load_tolerates_missing_fields():
    doc = store.load('{"name": "Jane", "sections": []}')
    assert doc.name == "Jane"
    assert (doc.email, doc.address, doc.phone) == ("", "", "")
    assert doc.sections == ()


def test_load_keeps_missing_entry_keys_absent():
    doc = store.load('{"sections": [{"name": "Skills", "entries": [{"title": "Python"}]}]}')
    assert dict(doc.sections[0].entries[0]) == {"title": "Python"}


def test_load_coerces_scalar_values_to_text():
    doc = store.load('{"phone": 5550100, "sections": [{"name": "X", "entries": [{"date": 2020, "current": true}]}]}')
    assert doc.phone == "5550100"
    assert dict(doc.sections[0].entries[0]) == {"date": "2020", "current": "true"}


@pytest.mark.parametrize(
    "text",
    [
        "[]",
        '{"sections": "Education"}',
        '{"sections": ["Education"]}',
        '{"sections": [{"name": "A", "entries": {}}]}',
        '{"sections": [{"name": "A", "entries": [{"title": ["x"]}]}]}',
    ],
)
def test_load_rejects_unrepresentable_shapes(text):
    with pytest.raises(InvalidDocumentError):
        store.load(text)


def test_load_rejects_deeply_nested_json():
    with pytest.raises(InvalidDocumentError):
        store.load('{"name": "x", "sections": [], "extra": ' + "[" * 100000 + "]" * 100000 + "}")


def test_documents_compare_by_value_but_are_not_hashable(sample_doc):
    assert sample_doc == store.load(serializer.dumps(sample_doc))
    assert not isinstance(sample_doc, Hashable)
    assert not isinstance(sample_doc.sections[0], Hashable)
    with pytest.raises(TypeError):
        hash(store.create_empty())
