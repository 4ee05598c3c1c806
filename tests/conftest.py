"""
Shared fixtures for the CV editor tests.

Fixtures:
---------
- sample_data: a CV payload with extra keys at every level
- sample_text: the same payload as JSON text
- sample_doc: the payload loaded as a CVDocument
- session: an EditorSession holding sample_doc
- client: Flask test client backed by a fresh EditorSession
"""

import json

import pytest

from cv_editor import document as store
from cv_editor.app import app as flask_app
from cv_editor.app import configure_app
from cv_editor.config import Settings
from cv_editor.session import EditorSession


@pytest.fixture
def sample_data():
    return {
        "name": "Jane Doe",
        "email": "jane@example.com",
        "address": "1 Main St",
        "phone": "555-0100",
        "sections": [
            {
                "name": "Education",
                "entries": [
                    {"title": "BSc", "date": "2015", "institution": "Uni", "notes": "", "gpa": "3.9"},
                ],
            },
            {
                "name": "Work Experience",
                "entries": [
                    {"title": "Engineer", "date": "2016-2020", "institution": "Acme", "notes": "Built things"},
                    {"title": "Lead", "date": "2020-", "institution": "Globex", "notes": ""},
                ],
            },
            {"name": "Skills", "entries": [], "icon": "star"},
        ],
        "website": "https://jane.example.com",
    }


@pytest.fixture
def sample_text(sample_data):
    return json.dumps(sample_data)


@pytest.fixture
def sample_doc(sample_text):
    return store.load(sample_text)


@pytest.fixture
def session(sample_text):
    editor = EditorSession()
    editor.import_text(sample_text)
    return editor


@pytest.fixture
def client():
    configure_app(flask_app, Settings())
    flask_app.config.update(TESTING=True)
    with flask_app.test_client() as test_client:
        yield test_client
    configure_app(flask_app, Settings())
