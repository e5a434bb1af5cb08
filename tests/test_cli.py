import pytest
import requests

import cli


@pytest.fixture(autouse=True)
def env(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("API_URL", "https://alert-api.test/DrExtract")
    monkeypatch.setenv("PHYSICIAN_NOTE_PATH", str(tmp_path / "physician_note1.txt"))
    monkeypatch.delenv("REQUEST_TIMEOUT", raising=False)


def _post_returning(status_code, calls):
    def fake_post(url, json=None, timeout=None, **kwargs):
        calls.append((url, json, timeout))
        resp = requests.Response()
        resp.status_code = status_code
        resp.url = url
        return resp
    return fake_post


def _post_raising(exc):
    def fake_post(url, json=None, timeout=None, **kwargs):
        raise exc
    return fake_post


@pytest.fixture
def note(tmp_path):
    path = tmp_path / "physician_note1.txt"
    path.write_text("Prescription: CPAP therapy\nOrdering Physician: Dr. Johnson", encoding="utf-8")
    return path


def test_success_uses_configured_note_path(monkeypatch, note):
    calls = []
    monkeypatch.setattr(requests, "post", _post_returning(200, calls))
    assert cli.main([]) == 0
    url, payload, timeout = calls[0]
    assert url == "https://alert-api.test/DrExtract"
    assert payload["device"] == "CPAP"
    assert timeout == 30.0


def test_positional_path_overrides_configuration(monkeypatch, tmp_path):
    other = tmp_path / "other.txt"
    other.write_text("Recommendation: wheelchair", encoding="utf-8")
    calls = []
    monkeypatch.setattr(requests, "post", _post_returning(200, calls))
    assert cli.main([str(other)]) == 0
    assert calls[0][1]["device"] == "Wheelchair"


def test_missing_note_exit_code(monkeypatch, tmp_path):
    assert cli.main([str(tmp_path / "missing.txt")]) == 1


def test_invalid_envelope_exit_code(tmp_path):
    bad = tmp_path / "bad.json"
    bad.write_text('{"data": ', encoding="utf-8")
    assert cli.main([str(bad)]) == 2


def test_http_failure_exit_code(monkeypatch, note):
    monkeypatch.setattr(requests, "post", _post_returning(500, []))
    assert cli.main([]) == 3


def test_timeout_exit_code(monkeypatch, note):
    monkeypatch.setattr(requests, "post", _post_raising(requests.Timeout("timed out")))
    assert cli.main([]) == 4


def test_unexpected_error_exit_code(monkeypatch, note):
    monkeypatch.setattr(requests, "post", _post_raising(RuntimeError("boom")))
    assert cli.main([]) == 5


def test_configured_timeout_is_used(monkeypatch, note):
    monkeypatch.setenv("REQUEST_TIMEOUT", "5")
    calls = []
    monkeypatch.setattr(requests, "post", _post_returning(200, calls))
    assert cli.main([]) == 0
    assert calls[0][2] == 5.0
