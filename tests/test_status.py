"""Tests for status aggregation."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

from stx.models import Target
from stx.status import fetch_all_servers_status, fetch_server_status

SELF_ID = "ABCDEFG-1234567-ABCDEFG-1234567-ABCDEFG-1234567-ABCDEFG-1234567"
PEER_ID = "DEVICEID-1234567"


def _fake_daemon(fake_cls, url):
    fake = fake_cls(
        url,
        device_id=SELF_ID,
        config={
            "folders": [{"id": "folder-1", "label": "Test Folder"}, {"id": "gone", "label": "Gone"}],
            "devices": [
                {"deviceID": SELF_ID, "name": "local"},
                {"deviceID": PEER_ID, "name": "remote"},
                {"deviceID": "OFFLINE-0000000", "name": "offline"},
            ],
        },
    )
    fake.connections = {
        "connections": {
            PEER_ID: {
                "address": "192.168.1.1:22000",
                "clientVersion": "v1.27.0",
                "connected": True,
                "inBytesTotal": 1000,
                "outBytesTotal": 2000,
            }
        }
    }
    fake.folder_status = {
        "folder-1": {"state": "idle", "globalBytes": 1024000, "localBytes": 1024000,
                     "needBytes": 0, "pullErrors": 0},
    }
    return fake


class TestFetchServerStatus:
    def test_aggregates_one_server(self, fakes, factory, fake_cls):
        """System, folders, and peer devices are combined into one report."""
        fakes["http://a:8384"] = _fake_daemon(fake_cls, "http://a:8384")
        status = fetch_server_status(Target(name="a", url="http://a:8384", api_key="k"), factory)

        assert status.server == "a"
        assert status.url == "http://a:8384"
        assert status.error is None
        assert status.system.device_id == SELF_ID
        assert status.system.uptime == 3720
        assert [f.id for f in status.folders] == ["folder-1"]
        assert status.folders[0].global_bytes == 1024000

    def test_self_excluded_from_devices(self, fakes, factory, fake_cls):
        """A node never reports itself as a peer."""
        fakes["http://a:8384"] = _fake_daemon(fake_cls, "http://a:8384")
        status = fetch_server_status(Target(name="a", url="http://a:8384"), factory)

        ids = [d.device_id for d in status.devices]
        assert SELF_ID not in ids
        assert ids == [PEER_ID, "OFFLINE-0000000"]

        peer, offline = status.devices
        assert peer.connected is True
        assert peer.client_version == "v1.27.0"
        assert offline.connected is False
        assert offline.address is None

    def test_failed_folder_is_omitted(self, fakes, factory, fake_cls):
        """A folder whose status fails is dropped, the server is still OK."""
        fakes["http://a:8384"] = _fake_daemon(fake_cls, "http://a:8384")
        status = fetch_server_status(Target(name="a", url="http://a:8384"), factory)

        assert status.error is None
        assert "gone" not in [f.id for f in status.folders]

    def test_folder_lookups_after_config(self, fakes, factory, fake_cls):
        """Folder status is only requested once the config is known."""
        fake = _fake_daemon(fake_cls, "http://a:8384")
        fakes["http://a:8384"] = fake
        fetch_server_status(Target(name="a", url="http://a:8384"), factory)

        first_folder_call = fake.calls.index("get_folder_status")
        assert fake.calls.index("get_config") < first_folder_call
        assert fake.calls.count("get_folder_status") == 2

    def test_unreadable_folder_status_is_omitted(self, fakes, factory, fake_cls):
        """A folder status body that does not parse is skipped like a failed call."""
        fake = _fake_daemon(fake_cls, "http://a:8384")
        fake.folder_status["gone"] = {"state": None}
        fakes["http://a:8384"] = fake

        status = fetch_server_status(Target(name="a", url="http://a:8384"), factory)

        assert status.error is None
        assert [f.id for f in status.folders] == ["folder-1"]


class TestFetchAllServersStatus:
    def test_partial_failure_over_http(self):
        """Target A answers 500, target B is healthy: both are reported."""
        responses = {
            "http://b:8384/rest/system/status": {"myID": SELF_ID, "uptime": 7260, "startTime": "s"},
            "http://b:8384/rest/system/connections": {"connections": {}},
            "http://b:8384/rest/system/config": {
                "folders": [{"id": "f1", "label": "F1"}],
                "devices": [{"deviceID": SELF_ID, "name": "me"}, {"deviceID": PEER_ID, "name": "p"}],
            },
            "http://b:8384/rest/db/status?folder=f1": {"state": "syncing", "globalBytes": 5},
        }

        def fake_request(method, url, **kwargs):
            resp = MagicMock()
            if url.startswith("http://a:8384"):
                resp.status_code = 500
                resp.text = "internal error"
                return resp
            resp.status_code = 200
            resp.text = "{}"
            resp.json.return_value = responses[url]
            return resp

        targets = [
            Target(name="A", url="http://a:8384", api_key="ka"),
            Target(name="B", url="http://b:8384", api_key="kb"),
        ]
        with patch("stx.api.requests.request", side_effect=fake_request):
            result = fetch_all_servers_status(targets)

        assert len(result.servers) == 2
        by_name = {s.server: s for s in result.servers}

        a = by_name["A"]
        assert a.error is not None and "500" in a.error
        assert a.system is None
        assert a.folders is None and a.devices is None

        b = by_name["B"]
        assert b.error is None
        assert b.system.device_id == SELF_ID
        assert [f.state for f in b.folders] == ["syncing"]
        assert [d.device_id for d in b.devices] == [PEER_ID]

    def test_every_target_reported(self, fakes, factory, fake_cls):
        fakes["http://a:8384"] = _fake_daemon(fake_cls, "http://a:8384")
        fakes["http://b:8384"] = fake_cls(
            "http://b:8384", fail={"get_connections": ConnectionError("down")}
        )
        targets = [Target(name="a", url="http://a:8384"), Target(name="b", url="http://b:8384")]

        result = fetch_all_servers_status(targets, factory)

        assert [s.server for s in result.servers] == ["a", "b"]
        assert result.servers[0].error is None
        assert result.servers[1].error == "down"
