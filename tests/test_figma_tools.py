"""Tests for the Figma client and the get_swift_tree tool."""

import logging
from unittest.mock import MagicMock, patch

import pytest
import requests

import config
import figma_tools
from figma_tools import (
    FigmaAPIError,
    NodeNotFoundError,
    build_swift_tree,
    fetch_figma_node,
    fetch_figma_variables,
    normalize_node_id,
)
from transform import to_json

ROOT = {
    "id": "1:2",
    "name": "Login",
    "type": "FRAME",
    "layoutMode": "VERTICAL",
    "itemSpacing": 16,
    "absoluteBoundingBox": {"x": 0, "y": 0, "width": 393, "height": 852},
    "children": [
        {"id": "1:3", "name": "Title", "type": "TEXT", "characters": "Welcome"},
        {
            "id": "1:4",
            "name": "Primary Action",
            "type": "FRAME",
            "children": [{"id": "1:5", "name": "Label", "type": "TEXT", "characters": "Sign In"}],
        },
    ],
}


def fake_response(payload=None, status=200, body=""):
    res = MagicMock()
    res.ok = 200 <= status < 300
    res.status_code = status
    res.text = body
    res.json.return_value = payload
    return res


def router(nodes=None, variables=None):
    def get(url, **kwargs):
        if url.endswith("/variables/local"):
            if isinstance(variables, Exception):
                raise variables
            return variables
        return nodes
    return get


@pytest.fixture(autouse=True)
def token(monkeypatch):
    monkeypatch.setattr(config, "FIGMA_TOKEN", "test-token")


class TestNormalizeNodeId:
    def test_dash_format(self):
        assert normalize_node_id("2217-48104") == "2217:48104"

    def test_colon_format(self):
        assert normalize_node_id(" 2217:48104 ") == "2217:48104"


class TestFetchFigmaNode:
    def test_sends_token_and_ids(self):
        payload = {"nodes": {"1:2": {"document": ROOT, "styles": {"S:1": "#fff"}}}}
        with patch.object(figma_tools.requests, "get", return_value=fake_response(payload)) as get:
            node, styles = fetch_figma_node("abc", "1:2")

        assert node is ROOT
        assert styles == {"S:1": "#fff"}
        args, kwargs = get.call_args
        assert args[0] == f"{config.FIGMA_API_BASE}/files/abc/nodes"
        assert kwargs["headers"] == {"X-Figma-Token": "test-token"}
        assert kwargs["params"] == {"ids": "1:2"}

    def test_missing_styles(self):
        payload = {"nodes": {"1:2": {"document": ROOT}}}
        with patch.object(figma_tools.requests, "get", return_value=fake_response(payload)):
            assert fetch_figma_node("abc", "1:2")[1] == {}

    def test_node_not_found(self):
        payload = {"nodes": {"9:9": {"document": ROOT}}}
        with patch.object(figma_tools.requests, "get", return_value=fake_response(payload)):
            with pytest.raises(NodeNotFoundError, match="Node 1:2 not found in file abc"):
                fetch_figma_node("abc", "1:2")

    def test_null_node_entry(self):
        payload = {"nodes": {"1:2": None}}
        with patch.object(figma_tools.requests, "get", return_value=fake_response(payload)):
            with pytest.raises(NodeNotFoundError):
                fetch_figma_node("abc", "1:2")

    def test_upstream_error_keeps_status_and_body(self):
        res = fake_response(status=403, body='{"status":403,"err":"Invalid token"}')
        with patch.object(figma_tools.requests, "get", return_value=res):
            with pytest.raises(FigmaAPIError, match="Figma API error 403") as exc:
                fetch_figma_node("abc", "1:2")
        assert exc.value.status_code == 403
        assert "Invalid token" in exc.value.body


class TestFetchFigmaVariables:
    def test_success(self):
        with patch.object(figma_tools.requests, "get", return_value=fake_response({"brand": "#0a84ff"})):
            assert fetch_figma_variables("abc") == {"brand": "#0a84ff"}

    def test_error_status_degrades(self, caplog):
        with patch.object(figma_tools.requests, "get", return_value=fake_response(status=429, body="rate limited")):
            with caplog.at_level(logging.WARNING, logger="figma_tools"):
                assert fetch_figma_variables("abc") == {}
        assert "rate limited" in caplog.text

    def test_transport_error_degrades(self):
        with patch.object(figma_tools.requests, "get", side_effect=requests.ConnectionError("down")):
            assert fetch_figma_variables("abc") == {}


class TestBuildSwiftTree:
    def test_builds_slim_tree(self):
        nodes = fake_response({"nodes": {"1:2": {"document": ROOT, "styles": {"S:1": "Heading", "S:2": {"x": 1}}}}})
        variables = fake_response({"status": 200, "error": False, "S:1": "Title", "brand": "#0a84ff"})
        with patch.object(figma_tools.requests, "get", side_effect=router(nodes, variables)):
            tree = build_swift_tree("abc", "1-2")

        assert tree == {
            "screen": "Login",
            "width": 393,
            "height": 852,
            "components": [
                {"name": "Title", "type": "Text", "content": "Welcome"},
                {"name": "Primary Action", "type": "Text", "content": "Sign In"},
            ],
            "tokens": {"S:1": "Title", "brand": "#0a84ff"},
        }

    def test_token_failure_does_not_abort(self):
        nodes = fake_response({"nodes": {"1:2": {"document": ROOT}}})
        with patch.object(figma_tools.requests, "get", side_effect=router(nodes, requests.Timeout("slow"))):
            tree = build_swift_tree("abc", "1:2")
        assert tree["tokens"] == {}
        assert len(tree["components"]) == 2

    def test_logs_payload_size(self, caplog):
        nodes = fake_response({"nodes": {"1:2": {"document": ROOT}}})
        with patch.object(figma_tools.requests, "get", side_effect=router(nodes, fake_response({}))):
            with caplog.at_level(logging.INFO, logger="figma_tools"):
                tree = build_swift_tree("abc", "1:2")
        size = len(to_json(tree).encode("utf-8"))
        assert f"into 2 slim nodes ({size} bytes)" in caplog.text

    def test_depth_override(self):
        nodes = fake_response({"nodes": {"1:2": {"document": ROOT}}})
        with patch.object(figma_tools.requests, "get", side_effect=router(nodes, fake_response({}))):
            tree = build_swift_tree("abc", "1:2", depth=1)
        assert tree["components"] == [{"name": "Title", "type": "Text", "content": "Welcome"}]


class TestGetSwiftTreeTool:
    def call(self, *args):
        tool = figma_tools.get_swift_tree
        return getattr(tool, "fn", tool)(*args)

    def test_not_found_is_structured_error(self):
        nodes = fake_response({"nodes": {}})
        with patch.object(figma_tools.requests, "get", side_effect=router(nodes, fake_response({}))):
            result = self.call("abc", "1:2")
        assert result == {"error": "Error fetching Figma node: Node 1:2 not found in file abc"}

    def test_upstream_failure_is_structured_error(self):
        nodes = fake_response(status=404, body="Not found")
        with patch.object(figma_tools.requests, "get", side_effect=router(nodes, fake_response({}))):
            result = self.call("abc", "1:2")
        assert result == {"error": "Error fetching Figma node: Figma API error 404: Not found"}
