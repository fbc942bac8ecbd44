import pytest

from xapo_auth.config import load_xapo_config, resolve_env_var
from xapo_auth.contracts import ConfigError


def test_env_var_interpolation(tmp_path, monkeypatch):
    """Test environment variable interpolation in the xapo section."""
    config_path = tmp_path / "config.yml"
    config_path.write_text(
        """
xapo:
  client_id: "${XAPO_TEST_CLIENT_ID}"
  client_secret: "${XAPO_TEST_CLIENT_SECRET}"
  callback_url: "https://${XAPO_TEST_HOST}/auth/xapo/callback"
  api_version: v3
"""
    )
    monkeypatch.setenv("XAPO_TEST_CLIENT_ID", "cid")
    monkeypatch.setenv("XAPO_TEST_CLIENT_SECRET", "secret")
    monkeypatch.setenv("XAPO_TEST_HOST", "www.example.net")

    config = load_xapo_config(config_path)

    assert config.client_id == "cid"
    assert config.client_secret == "secret"
    assert config.callback_url == "https://www.example.net/auth/xapo/callback"
    assert config.resolved_profile_url == "https://v3.api.xapo.com/users"


def test_missing_env_var(tmp_path, monkeypatch):
    """Test error handling for missing environment variables."""
    config_path = tmp_path / "config.yml"
    config_path.write_text("xapo:\n  client_id: ${XAPO_TEST_UNSET}\n")
    monkeypatch.delenv("XAPO_TEST_UNSET", raising=False)

    with pytest.raises(ConfigError, match="XAPO_TEST_UNSET"):
        load_xapo_config(config_path)


def test_path_from_environment(tmp_path, monkeypatch):
    config_path = tmp_path / "xapo.yml"
    config_path.write_text("callback_url: https://cb\nprofile_url: https://example/me\n")
    monkeypatch.setenv("XAPO_AUTH_CONFIG", str(config_path))

    config = load_xapo_config()

    assert config.callback_url == "https://cb"
    assert config.resolved_profile_url == "https://example/me"
    assert config.resolved_token_url == "https://v2.api.xapo.com/oauth2/token"


def test_missing_file(tmp_path):
    with pytest.raises(ConfigError, match="not found"):
        load_xapo_config(tmp_path / "absent.yml")


def test_invalid_yaml(tmp_path):
    config_path = tmp_path / "config.yml"
    config_path.write_text("xapo: [unclosed\n")

    with pytest.raises(ConfigError, match="Error parsing"):
        load_xapo_config(config_path)


def test_non_mapping_document(tmp_path):
    config_path = tmp_path / "config.yml"
    config_path.write_text("- just\n- a list\n")

    with pytest.raises(ConfigError, match="mapping"):
        load_xapo_config(config_path)


def test_unknown_fields_kept_as_client_options(tmp_path):
    config_path = tmp_path / "config.yml"
    config_path.write_text(
        "xapo:\n  callback_url: https://cb\n  client_id: 123456789\n  state: true\n"
    )

    config = load_xapo_config(config_path)

    assert config.client_id == "123456789"
    assert config.client_options == {"state": True}


def test_invalid_field_type(tmp_path):
    config_path = tmp_path / "config.yml"
    config_path.write_text("xapo:\n  callback_url: https://cb\n  skip_user_profile: [1]\n")

    with pytest.raises(ConfigError, match="Invalid Xapo config"):
        load_xapo_config(config_path)


def test_default_path_follows_home(tmp_path, monkeypatch):
    config_dir = tmp_path / ".xapo"
    config_dir.mkdir()
    (config_dir / "config.yml").write_text("xapo:\n  callback_url: https://home-cb\n")
    monkeypatch.delenv("XAPO_AUTH_CONFIG", raising=False)
    monkeypatch.setenv("HOME", str(tmp_path))

    config = load_xapo_config()

    assert config.callback_url == "https://home-cb"


def test_resolve_env_var_leaves_plain_strings(monkeypatch):
    monkeypatch.setenv("XAPO_TEST_A", "a")
    assert resolve_env_var("plain") == "plain"
    assert resolve_env_var("x-${XAPO_TEST_A}-${XAPO_TEST_A}") == "x-a-a"
