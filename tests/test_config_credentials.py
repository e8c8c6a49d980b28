"""Tests for settings loading and the credential store."""
import os
import stat
from pathlib import Path

import yaml

from pingcode_mcp.config import Settings, load_settings
from pingcode_mcp.credentials import CookieData, Credentials, CredentialStore, parse_cookie_header


class TestLoadSettings:
    """Test defaults, YAML file and environment precedence."""

    def test_defaults(self, tmp_path):
        settings = load_settings({"PINGCODE_DATA_DIR": str(tmp_path)})
        assert settings.domain == "neuralgalaxy.pingcode.com"
        assert settings.base_url == "https://neuralgalaxy.pingcode.com"
        assert settings.timeout == 30.0
        assert settings.credentials_path == tmp_path / "credentials.json"

    def test_yaml_file(self, tmp_path):
        (tmp_path / "config.yaml").write_text(
            yaml.safe_dump({"domain": "acme.pingcode.com", "default_project": "ACM"}), encoding="utf-8"
        )
        settings = load_settings({"PINGCODE_DATA_DIR": str(tmp_path)})
        assert settings.domain == "acme.pingcode.com"
        assert settings.default_project == "ACM"

    def test_environment_wins_over_file(self, tmp_path):
        (tmp_path / "config.yaml").write_text("domain: acme.pingcode.com\ntimeout: 5\n", encoding="utf-8")
        settings = load_settings({
            "PINGCODE_DATA_DIR": str(tmp_path),
            "PINGCODE_DOMAIN": "other.pingcode.com",
        })
        assert settings.domain == "other.pingcode.com"
        assert settings.timeout == 5.0

    def test_non_mapping_file_is_ignored(self, tmp_path):
        (tmp_path / "config.yaml").write_text("- just\n- a list\n", encoding="utf-8")
        assert load_settings({"PINGCODE_DATA_DIR": str(tmp_path)}).domain == "neuralgalaxy.pingcode.com"

    def test_timezone(self, tmp_path):
        assert Settings(data_dir=tmp_path).tzinfo() is None
        assert Settings(data_dir=tmp_path, timezone="Not/AZone").tzinfo() is None


class TestCredentials:
    def test_session_cookie_required(self):
        session = Credentials(cookies=[CookieData(name="sid_token", value="x")], domain="d", saved_at=0)
        plain = Credentials(cookies=[CookieData(name="lang", value="en")], domain="d", saved_at=0)
        empty = Credentials(domain="d", saved_at=0)
        assert session.is_valid()
        assert not plain.is_valid()
        assert not empty.is_valid()

    def test_expiry(self, credentials):
        credentials.expires_at = 1000
        assert credentials.is_valid(now_ms=999)
        assert not credentials.is_valid(now_ms=1001)

    def test_cookie_header(self, credentials):
        assert credentials.cookie_header() == "pc_session=abc; lang=en"

    def test_parse_cookie_header(self):
        cookies = parse_cookie_header(" sid=1; pc_token=a=b ;junk; =x", "acme.pingcode.com")
        assert [(c.name, c.value) for c in cookies] == [("sid", "1"), ("pc_token", "a=b")]
        assert all(c.domain == "acme.pingcode.com" for c in cookies)


class TestCredentialStore:
    """Test persistence of the credentials file."""

    def test_round_trip(self, tmp_path, credentials):
        store = CredentialStore(tmp_path / "nested" / "credentials.json")
        store.save(credentials)
        assert store.load() == credentials

    def test_file_is_owner_only(self, tmp_path, credentials):
        store = CredentialStore(tmp_path / "credentials.json")
        store.save(credentials)
        assert stat.S_IMODE(store.path.stat().st_mode) == 0o600

    def test_file_is_created_owner_only(self, tmp_path, credentials, monkeypatch):
        """The file never exists with looser permissions, even under umask 0."""
        monkeypatch.setattr(Path, "chmod", lambda *args, **kwargs: None)
        old_umask = os.umask(0)
        try:
            store = CredentialStore(tmp_path / "credentials.json")
            store.save(credentials)
        finally:
            os.umask(old_umask)
        assert stat.S_IMODE(store.path.stat().st_mode) == 0o600

    def test_existing_file_is_tightened(self, tmp_path, credentials):
        store = CredentialStore(tmp_path / "credentials.json")
        store.path.write_text("{}", encoding="utf-8")
        store.path.chmod(0o644)
        store.save(credentials)
        assert stat.S_IMODE(store.path.stat().st_mode) == 0o600
        assert store.load() == credentials

    def test_aliases_on_disk(self, tmp_path):
        store = CredentialStore(tmp_path / "credentials.json")
        store.save(Credentials(
            cookies=[CookieData(name="sid", value="1", http_only=True, same_site="Lax")],
            domain="d",
            saved_at=0,
        ))
        text = store.path.read_text(encoding="utf-8")
        assert '"httpOnly": true' in text
        assert '"sameSite": "Lax"' in text
        assert store.load().cookies[0].http_only is True

    def test_missing_and_corrupt_files(self, tmp_path):
        store = CredentialStore(tmp_path / "credentials.json")
        assert store.load() is None
        store.path.write_text("{not json", encoding="utf-8")
        assert store.load() is None
        store.path.write_text('{"cookies": []}', encoding="utf-8")
        assert store.load() is None

    def test_clear(self, tmp_path, credentials):
        store = CredentialStore(tmp_path / "credentials.json")
        assert store.clear() is False
        store.save(credentials)
        assert store.clear() is True
        assert not store.path.exists()
