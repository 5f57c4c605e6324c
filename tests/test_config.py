"""Tests for configuration loading."""

import pytest

from x402_facilitator.core.config import FacilitatorConfig, load_facilitator_config
from x402_facilitator.core.environment import build_environment, read_env_file
from x402_facilitator.core.errors import ConfigError


class TestFacilitatorConfig:
    def test_defaults(self):
        config = FacilitatorConfig()
        assert config.url == "https://x402.org/facilitator"
        assert config.transport_options() == {
            "max_retries": 2,
            "retry_backoff_ms": 100,
            "receive_timeout_ms": 5000,
        }

    def test_trailing_slash_is_stripped(self):
        assert FacilitatorConfig(url="https://f.test/api/").url == "https://f.test/api"

    @pytest.mark.parametrize(
        "field,value",
        [
            ("max_retries", -1),
            ("retry_backoff_ms", 1.5),
            ("receive_timeout_ms", "5000"),
            ("max_retries", False),
        ],
    )
    def test_rejects_invalid_numbers(self, field, value):
        with pytest.raises(ConfigError, match=field):
            FacilitatorConfig(**{field: value})

    @pytest.mark.parametrize("url", ["", "   ", "ftp://f.test", None])
    def test_rejects_invalid_url(self, url):
        with pytest.raises(ConfigError):
            FacilitatorConfig(url=url)

    def test_from_mapping(self):
        config = FacilitatorConfig.from_mapping(
            {
                "X402_FACILITATOR_URL": "https://f.test",
                "X402_FACILITATOR_NAME": "primary",
                "X402_MAX_RETRIES": "5",
                "X402_RETRY_BACKOFF_MS": "250",
                "X402_RECEIVE_TIMEOUT_MS": "1000",
            }
        )
        assert config == FacilitatorConfig(
            url="https://f.test",
            name="primary",
            max_retries=5,
            retry_backoff_ms=250,
            receive_timeout_ms=1000,
        )

    def test_from_mapping_rejects_non_integer(self):
        with pytest.raises(ConfigError, match="X402_MAX_RETRIES"):
            FacilitatorConfig.from_mapping({"X402_MAX_RETRIES": "lots"})

    def test_from_mapping_rejects_negative(self):
        with pytest.raises(ConfigError):
            FacilitatorConfig.from_mapping({"X402_RETRY_BACKOFF_MS": "-5"})


class TestEnvironmentLayers:
    def test_env_file_and_overrides(self, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text(
            "# facilitator\n"
            "export X402_FACILITATOR_URL=\"https://file.test\"\n"
            "X402_MAX_RETRIES=7\n"
            "X402_RETRY_BACKOFF_MS=10\n",
            encoding="utf-8",
        )
        config = load_facilitator_config(
            env_file=str(env_file),
            base={"X402_MAX_RETRIES": "1"},
            overrides={"X402_RETRY_BACKOFF_MS": "20"},
            receive_timeout_ms=30,
        )
        assert config.url == "https://file.test"
        assert config.max_retries == 1
        assert config.retry_backoff_ms == 20
        assert config.receive_timeout_ms == 30

    def test_missing_env_file_is_ignored(self, tmp_path):
        assert read_env_file(str(tmp_path / "absent.env")) == {}

    def test_build_environment_skips_file(self):
        environment = build_environment(env_file=None, base={"A": "1"}, overrides={"B": "2"})
        assert environment.get("A") == "1"
        assert environment.get("B") == "2"
        assert environment.get("C", "x") == "x"
