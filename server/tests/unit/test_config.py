"""Tests for configuration loading."""

import pytest
from pydantic import ValidationError

from tessera.config import Config, MailConfig


class TestConfig:
    def test_defaults(self):
        config = Config()

        assert config.auth.magic_link.expire_minutes == 15
        assert config.auth.magic_link.rate_limit_requests == 10
        assert config.auth.magic_link.rate_limit_window_minutes == 15
        assert config.auth.session.secure

    def test_nested_env_override(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("TESSERA_AUTH__SESSION__COOKIE_NAME", "sid")

        assert Config().auth.session.cookie_name == "sid"

    def test_yaml_file(self, tmp_path, monkeypatch: pytest.MonkeyPatch):
        path = tmp_path / "tessera.yaml"
        path.write_text("server:\n  base_url: https://tessera.example\n")
        monkeypatch.setenv("TESSERA_CONFIG_FILE", str(path))

        assert Config().server.base_url == "https://tessera.example"

    def test_http_mail_backend_needs_url(self):
        with pytest.raises(ValidationError):
            Config(mail=MailConfig(backend="http"))
