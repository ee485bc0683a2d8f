from __future__ import annotations

import pytest

from bitcoin_exporter.config.loader import (
    DEFAULT_BIND,
    DEFAULT_HOST,
    load_config,
    parse_bind,
)
from bitcoin_exporter.utils.exceptions import ConfigError

_ENV = ("HOST", "USER", "PASSWORD", "BIND", "TIMEOUT")


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch, tmp_path):
    for k in _ENV:
        monkeypatch.delenv(f"BITCOIN_EXPORTER_{k}", raising=False)
    # keep a developer's .env out of the picture
    monkeypatch.chdir(tmp_path)


def _write(tmp_path, text):
    p = tmp_path / "config.yaml"
    p.write_text(text, encoding="utf-8")
    return p


def test_defaults_applied(tmp_path):
    cfg = load_config(_write(tmp_path, "user: alice\npassword: s3cret\n"))
    assert cfg.host == DEFAULT_HOST
    assert cfg.bind == DEFAULT_BIND
    assert cfg.timeout == 30.0
    assert cfg.bind_address() == ("127.0.0.1", 9898)
    assert cfg.redacted()["password"] == "***"


def test_full_file(tmp_path):
    cfg = load_config(_write(tmp_path, (
        "host: http://node:8332\nuser: bob\npassword: pw\nbind: 0.0.0.0:9100\ntimeout: 5\n"
    )))
    assert (cfg.host, cfg.user, cfg.password, cfg.bind, cfg.timeout) == (
        "http://node:8332", "bob", "pw", "0.0.0.0:9100", 5.0)


def test_missing_file(tmp_path):
    with pytest.raises(ConfigError, match="Can't open"):
        load_config(tmp_path / "nope.yaml")


def test_invalid_yaml(tmp_path):
    with pytest.raises(ConfigError, match="Can't read"):
        load_config(_write(tmp_path, "user: [unclosed\n"))


def test_non_mapping_yaml(tmp_path):
    with pytest.raises(ConfigError):
        load_config(_write(tmp_path, "- just\n- a list\n"))


def test_missing_credentials(tmp_path):
    with pytest.raises(ConfigError, match="password"):
        load_config(_write(tmp_path, "user: alice\n"))


def test_env_overrides_file(tmp_path, monkeypatch):
    monkeypatch.setenv("BITCOIN_EXPORTER_PASSWORD", "from-env")
    monkeypatch.setenv("BITCOIN_EXPORTER_BIND", "127.0.0.1:9200")
    monkeypatch.setenv("BITCOIN_EXPORTER_TIMEOUT", "2.5")
    cfg = load_config(_write(tmp_path, "user: alice\npassword: file\n"))
    assert cfg.password == "from-env"
    assert cfg.bind_address() == ("127.0.0.1", 9200)
    assert cfg.timeout == 2.5


def test_dotenv_file_in_working_directory(tmp_path):
    (tmp_path / ".env").write_text("BITCOIN_EXPORTER_USER=dotenv-user\n", encoding="utf-8")
    cfg = load_config(_write(tmp_path, "password: pw\n"))
    assert cfg.user == "dotenv-user"


def test_env_ignored_when_disabled(tmp_path, monkeypatch):
    monkeypatch.setenv("BITCOIN_EXPORTER_USER", "env-user")
    cfg = load_config(_write(tmp_path, "user: alice\npassword: pw\n"), use_env=False)
    assert cfg.user == "alice"


@pytest.mark.parametrize("bind", ["9898", "host:", ":9898", "host:abc", "host:0", "host:70000"])
def test_bad_bind(bind):
    with pytest.raises(ConfigError):
        parse_bind(bind)


def test_ipv6_bind():
    assert parse_bind("[::1]:9898") == ("::1", 9898)


def test_bad_timeout(tmp_path):
    with pytest.raises(ConfigError):
        load_config(_write(tmp_path, "user: a\npassword: b\ntimeout: -1\n"))
