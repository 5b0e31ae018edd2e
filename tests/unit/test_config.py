"""Unit tests for environment-driven settings."""

import pytest
from pydantic import ValidationError

from hitomi_source.config import Settings


def test_defaults_from_test_environment(settings):
    assert settings.base_url == "https://hitomi.la"
    assert settings.ltn_base_url == "https://ltn.hitomi.la"
    assert settings.index_version_ttl_seconds == 600
    assert settings.detail_fetch_fail_fast is True
    assert settings.use_high_quality_thumbs is False


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("MAX_CONCURRENT_REQUESTS", "3")
    monkeypatch.setenv("USE_HIGH_QUALITY_THUMBS", "true")
    monkeypatch.setenv("INDEX_VERSION_TTL_SECONDS", "30")

    settings = Settings()

    assert settings.max_concurrent_requests == 3
    assert settings.use_high_quality_thumbs is True
    assert settings.index_version_ttl_seconds == 30.0


def test_trailing_slashes_are_stripped(monkeypatch):
    monkeypatch.setenv("LTN_BASE_URL", "https://mirror.test/")

    settings = Settings()

    assert settings.ltn_base_url == "https://mirror.test"
    assert settings.ltn_url("/gg.js") == "https://mirror.test/gg.js"
    assert settings.ltn_url("n/index-all.nozomi") == "https://mirror.test/n/index-all.nozomi"


@pytest.mark.parametrize("value", ["hitomi.la", "ftp://hitomi.la"])
def test_non_http_base_url_is_rejected(monkeypatch, value):
    monkeypatch.setenv("BASE_URL", value)

    with pytest.raises(ValidationError):
        Settings()


def test_concurrency_must_be_positive(monkeypatch):
    monkeypatch.setenv("MAX_CONCURRENT_REQUESTS", "0")

    with pytest.raises(ValidationError):
        Settings()


def test_referer_and_user_agent(settings):
    assert settings.get_referer() == "https://hitomi.la/"
    assert settings.get_random_user_agent() in settings.USER_AGENTS
