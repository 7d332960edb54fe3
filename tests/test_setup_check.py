"""Tests for the setup checklist."""

from brandfinder.setup_check import check_setup


def test_ready(test_settings, quiet_console, console_text):
    assert check_setup(test_settings, out=quiet_console) == []
    assert "contains 3 brands" in console_text()
    assert "Setup complete" in console_text()


def test_reports_missing_pieces(test_settings, tmp_path, quiet_console, console_text):
    settings = test_settings.model_copy(
        update={"OPENROUTER_API_KEY": None, "BRANDS_FILE": str(tmp_path / "missing.json")}
    )

    failures = check_setup(settings, out=quiet_console)

    assert failures == ["brands_file", "api_key"]
    assert "OPENROUTER_API_KEY is not set" in console_text()
