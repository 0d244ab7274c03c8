"""
Unit Tests for Configuration
============================
"""

import pytest

from lessotp.config import ConsumePolicy, OTPServiceConfig
from lessotp.exceptions import ConfigurationError
from lessotp.template import TemplateGrammar

ENV_VARS = (
    "LESSOTP_SECRET_SALT",
    "LESSOTP_CIPHER",
    "LESSOTP_IV_LENGTH",
    "LESSOTP_REPLAY_PROTECTION",
    "LESSOTP_CONSUME_POLICY",
    "LESSOTP_TEMPLATE_GRAMMAR",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class TestOTPServiceConfig:
    """Tests for the config dataclass."""

    def test_defaults(self):
        """Defaults match the reference cipher and policies."""
        config = OTPServiceConfig()

        assert config.secret_salt is None
        assert config.algorithm == "aes-256-cbc"
        assert config.iv_length == 16
        assert config.replay_protection_enabled is True
        assert config.consume_policy is ConsumePolicy.ON_MATCH
        assert config.template_grammar is TemplateGrammar.STRICT

    def test_empty_secret_rejected(self):
        """An empty secret is not a secret."""
        with pytest.raises(ConfigurationError):
            OTPServiceConfig(secret_salt="")

    def test_string_enums_accepted(self):
        """Policy and grammar may be given as strings."""
        config = OTPServiceConfig(consume_policy="on_decode", template_grammar="legacy")

        assert config.consume_policy is ConsumePolicy.ON_DECODE
        assert config.template_grammar is TemplateGrammar.LEGACY

    def test_immutable(self):
        """Config cannot change after construction."""
        config = OTPServiceConfig(secret_salt="s")

        with pytest.raises(AttributeError):
            config.secret_salt = "other"


class TestFromEnv:
    """Tests for environment loading."""

    def test_empty_environment(self):
        """No variables gives the defaults."""
        assert OTPServiceConfig.from_env() == OTPServiceConfig()

    def test_reads_variables(self, monkeypatch):
        """LESSOTP_* variables override defaults."""
        monkeypatch.setenv("LESSOTP_SECRET_SALT", "from-env")
        monkeypatch.setenv("LESSOTP_CIPHER", "aes-128-cbc")
        monkeypatch.setenv("LESSOTP_REPLAY_PROTECTION", "off")
        monkeypatch.setenv("LESSOTP_CONSUME_POLICY", "ON_DECODE")
        monkeypatch.setenv("LESSOTP_TEMPLATE_GRAMMAR", "legacy")

        config = OTPServiceConfig.from_env()

        assert config.secret_salt == "from-env"
        assert config.algorithm == "aes-128-cbc"
        assert config.replay_protection_enabled is False
        assert config.consume_policy is ConsumePolicy.ON_DECODE
        assert config.template_grammar is TemplateGrammar.LEGACY

    @pytest.mark.parametrize(
        "name, value",
        [
            ("LESSOTP_REPLAY_PROTECTION", "maybe"),
            ("LESSOTP_IV_LENGTH", "sixteen"),
            ("LESSOTP_CONSUME_POLICY", "sometimes"),
        ],
    )
    def test_bad_values(self, monkeypatch, name, value):
        """Unparseable variables raise ConfigurationError."""
        monkeypatch.setenv(name, value)

        with pytest.raises(ConfigurationError):
            OTPServiceConfig.from_env()
