"""Unit tests for merging request provider settings over the configured defaults."""
import pytest

from legal_review.config import settings
from legal_review.dependencies import build_provider_config


@pytest.fixture
def deepseek_defaults(monkeypatch):
    monkeypatch.setattr(settings, "default_provider", "deepseek")
    monkeypatch.setattr(settings, "default_api_key", "sk-deepseek-secret")
    monkeypatch.setattr(settings, "default_model", "deepseek-reasoner")


def test_defaults_fill_a_blank_request(deepseek_defaults):
    config = build_provider_config(None, None, None)

    assert config.provider == "deepseek"
    assert config.api_key == "sk-deepseek-secret"
    assert config.model == "deepseek-reasoner"


def test_default_key_and_model_stay_with_the_default_provider(deepseek_defaults):
    config = build_provider_config("Tongyi", None, None)

    assert config.provider == "tongyi"
    assert config.api_key == ""
    assert config.model is None


def test_request_values_win(deepseek_defaults):
    config = build_provider_config("doubao", " sk-ark ", "ep-20240604-abc")

    assert (config.provider, config.api_key, config.model) == ("doubao", "sk-ark", "ep-20240604-abc")
