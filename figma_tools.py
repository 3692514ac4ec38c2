import logging
from typing import Optional

import requests

import config
from mcp_server import mcp
from transform import compress_tree, count_nodes, to_json

logger = logging.getLogger(__name__)


class FigmaError(Exception):
    pass


class FigmaAPIError(FigmaError):
    def __init__(self, status_code: int, body: str):
        self.status_code = status_code
        self.body = body
        super().__init__(f"Figma API error {status_code}: {body}")


class NodeNotFoundError(FigmaError):
    def __init__(self, file_key: str, node_id: str):
        self.file_key = file_key
        self.node_id = node_id
        super().__init__(f"Node {node_id} not found in file {file_key}")


def normalize_node_id(node_id: str) -> str:
    """URLs carry node ids as `12-34`; the API expects `12:34`."""
    return node_id.strip().replace("-", ":")


def figma_api_get(path, params=None):
    url = f"{config.FIGMA_API_BASE}{path}"
    headers = {"X-Figma-Token": config.FIGMA_TOKEN or ""}
    logger.debug("GET %s params=%s", url, params)
    res = requests.get(url, headers=headers, params=params, timeout=config.FIGMA_TIMEOUT)
    if not res.ok:
        raise FigmaAPIError(res.status_code, res.text)
    return res.json()


def fetch_figma_node(fileKey: str, nodeId: str):
    """Return the raw document of a node together with its style map."""
    raw = figma_api_get(f"/files/{fileKey}/nodes", params={"ids": nodeId})
    node_data = (raw.get("nodes") or {}).get(nodeId)
    if not node_data or not node_data.get("document"):
        raise NodeNotFoundError(fileKey, nodeId)
    return node_data["document"], node_data.get("styles") or {}


def fetch_figma_variables(fileKey: str) -> dict:
    # Tokens are optional; a failure here must not abort the tree
    try:
        data = figma_api_get(f"/files/{fileKey}/variables/local")
    except (FigmaAPIError, requests.RequestException, ValueError) as e:
        logger.warning("Variables lookup failed for %s: %s", fileKey, e)
        return {}
    return data if isinstance(data, dict) else {}


def build_swift_tree(fileKey: str, nodeId: str, depth: Optional[int] = None) -> dict:
    nodeId = normalize_node_id(nodeId)
    node, styles = fetch_figma_node(fileKey, nodeId)
    variables = fetch_figma_variables(fileKey)

    tree = compress_tree(
        node,
        styles={**styles, **variables},
        max_depth=depth if depth is not None else config.MAX_DEPTH,
    )
    logger.info(
        "Compressed %s:%s into %d slim nodes (%d bytes)",
        fileKey, nodeId, count_nodes(tree["components"]), len(to_json(tree).encode("utf-8")),
    )
    return tree


@mcp.tool(
    name="get_swift_tree",
    description="""
    Fetches a Figma design node and returns a slim, SwiftUI-oriented component tree.

    The tree holds the component hierarchy, stack layout (spacing, padding), fills,
    corner radii, SF Symbol names for icon glyphs and design tokens. Raw Figma data
    is compressed server-side so only the structure needed for code generation is returned.

    fileKey: from the URL figma.com/design/<fileKey>/...
    nodeId: from the URL ?node-id=<nodeId>; dash or colon format.
    depth: optional maximum traversal depth (default 20).
    """
)
def get_swift_tree(fileKey: str, nodeId: str, depth: Optional[int] = None):
    try:
        return build_swift_tree(fileKey, nodeId, depth)
    except Exception as e:
        logger.error("get_swift_tree failed for %s/%s: %s", fileKey, nodeId, e)
        return {"error": f"Error fetching Figma node: {e}"}
