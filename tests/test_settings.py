"""Tests for environment-driven settings."""

import pytest

from cushion.config import get_settings, validate_all_settings
from cushion.config.settings import AppSettings, GoogleSheetsSettings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    # no stray .env file or credentials from the host
    monkeypatch.chdir(tmp_path)
    for name in ("GOOGLE_SHEETS_CREDENTIALS_PATH", "GOOGLE_SHEETS_SPREADSHEET_ID",
                 "CHECKPOINT_TOLERANCE", "PLAN_MONTH_COLUMN"):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class TestAppSettings:
    """Defaults and environment overrides of the app section."""

    def test_defaults(self):
        app = AppSettings()
        assert app.default_currency == "EUR"
        assert app.checkpoint_tolerance == 0.01
        assert app.plan_month_column == "Month"
        assert app.plan_header_scan_rows == 20

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv("PLAN_MONTH_COLUMN", "Mes")
        monkeypatch.setenv("CHECKPOINT_TOLERANCE", "0.5")
        app = get_settings().app
        assert app.plan_month_column == "Mes"
        assert app.checkpoint_tolerance == 0.5


class TestGoogleSheetsSettings:
    """The storage section needs credentials only when it is used."""

    def test_missing_credentials_fail(self):
        with pytest.raises(Exception):
            GoogleSheetsSettings()

    def test_sheet_names_default(self, monkeypatch, tmp_path):
        credentials = tmp_path / "creds.json"
        credentials.write_text("{}")
        monkeypatch.setenv("GOOGLE_SHEETS_CREDENTIALS_PATH", str(credentials))
        monkeypatch.setenv("GOOGLE_SHEETS_SPREADSHEET_ID", "sheet-1")
        sheets = GoogleSheetsSettings()
        assert sheets.transactions_sheet_name == "Transactions"
        assert sheets.plan_sheet_name == "Plan"

    def test_validate_all_reports_per_section(self):
        results = validate_all_settings()
        assert results["app"] is True
        assert results["google_sheets"] is False
        assert "google_sheets_error" in results
