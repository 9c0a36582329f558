import pytest
from app import create_app
from test_helpers import create_mock_excel_bytes, get_event_header_row, SERIAL_14_05


TEST_DELETE_PASS = "test-delete-pass"


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    """Keep a developer's .env / config.json out of the tests."""
    for key in ("UPLOAD_FOLDER", "DELETE_PASS", "ALLOWED_ORIGINS", "SENTRY_DSN"):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("CONFIG_PATH", str(tmp_path / "missing-config.json"))


@pytest.fixture
def upload_folder(tmp_path):
    folder = tmp_path / "uploads"
    folder.mkdir()
    return folder


@pytest.fixture
def app(upload_folder):
    """Flask app wired to a temporary upload folder."""
    app = create_app('Testing', overrides={
        "UPLOAD_FOLDER": str(upload_folder),
        "DELETE_PASS": TEST_DELETE_PASS,
    })
    with app.app_context():
        yield app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def admin_headers():
    return {"X-Admin-Pass": TEST_DELETE_PASS}


@pytest.fixture
def launch_workbook_bytes():
    """One sheet, one event row with separate date and time columns."""
    return create_mock_excel_bytes({
        "Sheet1": [
            get_event_header_row(),
            ["Launch", "2024-03-01", SERIAL_14_05, "10", "2"],
        ]
    })


@pytest.fixture
def stored_workbook(upload_folder, launch_workbook_bytes):
    """Write the launch workbook into the upload folder and return its name."""
    name = "launch.xlsx"
    (upload_folder / name).write_bytes(launch_workbook_bytes)
    return name
