"""Tests for the server registry."""

from __future__ import annotations

import json
import os
import stat
import sys

import pytest

from stx.exceptions import ConfigurationError
from stx.registry import ServerEntry, ServerRegistry


@pytest.fixture
def registry(stx_home):
    return ServerRegistry(stx_home)


class TestServerRegistry:
    def test_empty(self, registry):
        assert registry.list_names() == []
        assert registry.load().version == 1

    def test_upsert_and_resolve(self, registry):
        registry.upsert("safe-101", ServerEntry(url="http://100.64.0.7:8384", api_key="k1"))
        target = registry.resolve("safe-101")
        assert target.name == "safe-101"
        assert target.url == "http://100.64.0.7:8384"
        assert target.api_key == "k1"

    def test_file_format(self, registry):
        """The registry is a versioned JSON document with camelCase keys."""
        registry.upsert("a", ServerEntry(url="http://a", api_key="k"))
        data = json.loads(registry.path.read_text())
        assert data == {"version": 1, "servers": {"a": {"url": "http://a", "apiKey": "k"}}}

    @pytest.mark.skipif(sys.platform == "win32", reason="POSIX permissions")
    def test_owner_only_permissions(self, registry):
        registry.upsert("a", ServerEntry(url="http://a", api_key="k"))
        assert stat.S_IMODE(os.stat(registry.path).st_mode) == 0o600

    def test_upsert_overwrites(self, registry):
        registry.upsert("a", ServerEntry(url="http://old", api_key="k"))
        registry.upsert("a", ServerEntry(url="http://new", api_key="k2"))
        assert registry.resolve("a").url == "http://new"
        assert registry.list_names() == ["a"]

    def test_list_sorted(self, registry):
        for name in ("zeta", "alpha", "mid"):
            registry.upsert(name, ServerEntry(url=f"http://{name}"))
        assert registry.list_names() == ["alpha", "mid", "zeta"]

    def test_remove(self, registry):
        registry.upsert("a", ServerEntry(url="http://a"))
        assert registry.remove("a") is True
        assert registry.remove("a") is False
        assert registry.list_names() == []

    def test_unknown_name(self, registry):
        with pytest.raises(ConfigurationError, match="Unknown server: nope"):
            registry.resolve("nope")

    def test_resolve_many(self, registry):
        registry.upsert("b", ServerEntry(url="http://b"))
        registry.upsert("a", ServerEntry(url="http://a"))
        assert [t.name for t in registry.resolve_many()] == ["a", "b"]
        assert [t.name for t in registry.resolve_many(["b"])] == ["b"]
        with pytest.raises(ConfigurationError):
            registry.resolve_many(["a", "missing"])

    def test_legacy_file_migrated(self, registry, stx_home):
        (stx_home / "servers.json").write_text(json.dumps(
            {"servers": {"old": {"url": "http://old", "apiKey": "k"}}}
        ))
        data = registry.load()
        assert data.version == 1
        assert registry.resolve("old").api_key == "k"

    def test_invalid_json(self, registry, stx_home):
        (stx_home / "servers.json").write_text("{not json")
        with pytest.raises(ConfigurationError):
            registry.load()

    def test_key_not_logged(self, registry, caplog):
        with caplog.at_level("INFO", logger="stx.registry"):
            registry.upsert("a", ServerEntry(url="http://a", api_key="super-secret"))
        assert "super-secret" not in caplog.text
        assert "REDACTED" in caplog.text

    def test_resolve_many_drops_duplicates(self, registry):
        registry.upsert("a", ServerEntry(url="http://a"))
        registry.upsert("b", ServerEntry(url="http://b"))
        assert [t.name for t in registry.resolve_many(["b", "a", "b", "a"])] == ["b", "a"]

    def test_top_level_not_an_object(self, registry, stx_home):
        (stx_home / "servers.json").write_text("[]")
        with pytest.raises(ConfigurationError, match="JSON object"):
            registry.load()

    def test_entry_missing_url(self, registry, stx_home):
        (stx_home / "servers.json").write_text(json.dumps(
            {"version": 1, "servers": {"a": {"apiKey": "x"}}}
        ))
        with pytest.raises(ConfigurationError, match="Invalid registry"):
            registry.resolve("a")

    def test_unwritable_home(self, tmp_path):
        """A config dir that cannot be created is a configuration error."""
        blocker = tmp_path / "file"
        blocker.write_text("x")
        with pytest.raises(ConfigurationError, match="Cannot write"):
            ServerRegistry(blocker).upsert("a", ServerEntry(url="http://a"))
