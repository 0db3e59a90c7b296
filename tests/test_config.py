"""Tests for environment-driven settings."""

import pytest
from pydantic import ValidationError

from crpt_api.core.config import ClientSettings, LogSettings, Settings


def test_client_settings_read_prefixed_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CRPT_MAX_PENDING", "8")
    monkeypatch.setenv("CRPT_RESULT_TIMEOUT_SECONDS", "12.5")
    monkeypatch.setenv("CRPT_SIGNATURE_HEADER", "X-Sign")

    cfg = ClientSettings()

    assert cfg.max_pending == 8
    assert cfg.result_timeout_seconds == 12.5
    assert cfg.signature_header == "X-Sign"


def test_client_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("CRPT_BASE_URL", raising=False)
    monkeypatch.delenv("CRPT_HTTP_TIMEOUT_SECONDS", raising=False)

    cfg = ClientSettings()

    assert cfg.base_url == "https://ismp.crpt.ru/api/v3/lk/documents/create"
    assert cfg.failure_status == 400
    assert cfg.max_pending is None
    assert cfg.result_timeout_seconds is None


@pytest.mark.parametrize(
    ("name", "value"),
    [
        ("CRPT_MAX_PENDING", "0"),
        ("CRPT_HTTP_TIMEOUT_SECONDS", "0"),
        ("CRPT_RESULT_TIMEOUT_SECONDS", "-1"),
    ],
)
def test_invalid_values_fail_validation(monkeypatch: pytest.MonkeyPatch, name: str, value: str) -> None:
    monkeypatch.setenv(name, value)

    with pytest.raises(ValidationError):
        ClientSettings()


def test_settings_compose_nested_groups(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")

    cfg = Settings()

    assert isinstance(cfg.client, ClientSettings)
    assert isinstance(cfg.log, LogSettings)
    assert cfg.log.level == "DEBUG"
    assert cfg.app_env == "testing"
