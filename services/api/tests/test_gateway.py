"""
Tests for the page gateways (storage-backed and HTTP).

Run with: pytest tests/test_gateway.py -v
"""
import json

import httpx
import pytest

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from adapters.json import JsonAdapter
from core.gateway import HttpPageGateway, StoragePageGateway
from models.session import EditorSession

PAGE = {"rows": [{"id": "r-1", "type": "row", "settings": {}, "columns": [
    {"id": "c-1", "width": "100%", "elements": [
        {"id": "e-1", "type": "change-card", "data": {"title": "Dragon", "subtitle": "Boss"}, "style": {}},
    ]},
]}], "settings": {}}


class TestStoragePageGateway:
    """Tests for the in-process gateway."""

    def test_load_and_save(self, tmp_path):
        storage = JsonAdapter(data_dir=str(tmp_path))
        version_id = storage.create_version("p1", "1.0", "Launch")
        gateway = StoragePageGateway(storage)

        assert gateway.load_page("p1", version_id) is None
        gateway.save_page("p1", version_id, PAGE)
        assert gateway.load_page("p1", version_id) == PAGE

    def test_version_cards(self, tmp_path):
        storage = JsonAdapter(data_dir=str(tmp_path))
        old = storage.create_version("p1", "1.0", "Launch")
        new = storage.create_version("p1", "1.1", "Hotfix")
        storage.save_page("p1", old, PAGE)

        versions = StoragePageGateway(storage).list_version_cards("p1")

        assert [v["id"] for v in versions] == [new, old]
        assert versions[0]["cards"] == []
        assert versions[1]["cards"][0]["title"] == "Dragon"


class TestHttpPageGateway:
    """Tests for the remote gateway against a mocked transport."""

    def _gateway(self, handler):
        client = httpx.Client(transport=httpx.MockTransport(handler), base_url="http://devlog.test")
        return HttpPageGateway("http://devlog.test", client=client)

    def test_load_page(self):
        def handler(request):
            assert request.method == "GET"
            assert request.url.path == "/projects/p1/versions/v1/page"
            return httpx.Response(200, json={"content": PAGE, "updatedAt": "2024-01-01T00:00:00"})

        assert self._gateway(handler).load_page("p1", "v1") == PAGE

    def test_load_page_not_saved_yet(self):
        gateway = self._gateway(lambda request: httpx.Response(200, json={"content": None, "updatedAt": None}))
        assert gateway.load_page("p1", "v1") is None

    def test_save_page_puts_content(self):
        seen = {}

        def handler(request):
            seen["method"] = request.method
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"ok": True, "updatedAt": "2024-01-01T00:00:00"})

        self._gateway(handler).save_page("p1", "v1", PAGE)
        assert seen == {"method": "PUT", "body": {"content": PAGE}}

    def test_save_error_raises(self):
        gateway = self._gateway(lambda request: httpx.Response(500, json={"detail": "boom"}))
        with pytest.raises(httpx.HTTPStatusError):
            gateway.save_page("p1", "v1", PAGE)

    def test_reads_retry_transport_errors(self):
        calls = {"n": 0}

        def handler(request):
            calls["n"] += 1
            if calls["n"] < 3:
                raise httpx.ConnectError("connection refused", request=request)
            return httpx.Response(200, json={"content": PAGE})

        assert self._gateway(handler).load_page("p1", "v1") == PAGE
        assert calls["n"] == 3

    def test_list_version_cards(self):
        body = {"versions": [{"id": "v1", "version": "1.0", "title": "Launch", "cards": []}]}
        gateway = self._gateway(lambda request: httpx.Response(200, json=body))
        assert gateway.list_version_cards("p1") == body["versions"]

    def test_session_falls_back_to_empty_page(self):
        """A failing remote read gives the editor an empty page."""
        gateway = self._gateway(lambda request: httpx.Response(404, json={"detail": "Version v1 not found"}))
        session = EditorSession("p1", "v1")
        session.load(gateway)
        assert session.state.loaded
        assert session.content.rows == []

    def test_requires_base_url(self):
        with pytest.raises(ValueError):
            HttpPageGateway("")
