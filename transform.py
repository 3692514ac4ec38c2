# transform.py

import json
import math

from config import MAX_DEPTH

# Private-use glyphs emitted by SF Pro text layers, mapped to SF Symbol names.
SF_SYMBOLS = {
    "\U00100189": "chevron.left",
    "\U0010014D": "questionmark",
    "\U00100211": "trash",
    "\U00100184": "xmark",
    "\U00100185": "checkmark",
    "\U0010018A": "chevron.right",
    "\U00100707": "location",
    "\U001006FF": "eye",
    "\U001003ED": "photo.on.rectangle",
    "\U001003F0": "photo.on.rectangle",
    "\U00100263": "tag",
    "\U001027B7": "trophy",
    "\U001010D0": "photo.badge.plus",
    "\U001001AA": "globe",
    "\U001003A0": "lock",
    "\U00100174": "info.circle",
    "\U001002AB": "heart",
    "\U001002AC": "heart.fill",
    "\U00100202": "square.and.arrow.up",
    "\U00100667": "person.2",
    "\U00100269": "bookmark",
    "\U0010035F": "ellipsis",
    "\U0010039E": "gear",
    "\U001008D8": "camera",
    "\U001003DF": "photo",
    "\U0010017C": "plus",
    "\U0010017D": "minus",
    "\U00100283": "magnifyingglass",
    "\U001002C2": "bell",
    "\U001002C3": "bell.fill",
    "\U0010031C": "house",
    "\U0010031D": "house.fill",
}

SHAPE_TYPES = {"VECTOR", "BOOLEAN_OPERATION"}
COMPONENT_TYPES = {"INSTANCE", "COMPONENT"}
CONTAINER_TYPES = {"FRAME", "GROUP"}
EMPTY_LEAF_TYPES = {"FRAME", "GROUP", "RECTANGLE", "INSTANCE", "COMPONENT"}

# System chrome, effect layers and scroll chrome. Matched on the trimmed, lower-cased name.
DECORATIVE_NAMES = {
    "status bar", "time", "levels", "cellular connection", "wifi",
    "blur", "mask", "shadow", "tint", "glass effect",
    "bg", "background",
    "thumb", "grabber",
    "cap", "capacity", "border",
}
DECORATIVE_PREFIXES = ("liquid glass", "scroll edge effect", "scrollbar")

GENERIC_NAMES = {"container", "contents", "content", "text", "image"}
GENERIC_PREFIXES = ("frame", "accessories", "_")

DEFAULT_INKS = {"#000000", "#000000ff"}
DEFAULT_FILLS = DEFAULT_INKS | {"#ffffff", "#ffffffff"}

MAX_CORNER_RADIUS = 100


def _is_childless_overlay(node: dict, name: str) -> bool:
    return name == "overlay" and not node.get("children")


DECORATIVE_RULES = (
    lambda node, name: name in DECORATIVE_NAMES,
    lambda node, name: name.startswith(DECORATIVE_PREFIXES),
    _is_childless_overlay,
)


# Node classifier

def is_decorative(node: dict) -> bool:
    if node.get("visible") is False:
        return True
    name = (node.get("name") or "").lower().strip()
    return any(rule(node, name) for rule in DECORATIVE_RULES)


def has_text_content(node: dict) -> bool:
    return node.get("type") == "TEXT" and bool((node.get("characters") or "").strip())


def is_empty_leaf(node: dict) -> bool:
    if has_text_content(node):
        return False
    if node.get("children"):
        return False
    # Vectors may be icon glyphs
    if node.get("type") in SHAPE_TYPES:
        return False
    return node.get("type") in EMPTY_LEAF_TYPES


def has_image_fill(node: dict) -> bool:
    fills = node.get("fills")
    if not isinstance(fills, list):
        return False
    return any(isinstance(f, dict) and f.get("type") == "IMAGE" for f in fills)


def has_text_descendant(node: dict) -> bool:
    if node.get("type") == "TEXT":
        return True
    return any(has_text_descendant(c) for c in node.get("children") or [])


def classify_type(node: dict) -> str:
    node_type = node.get("type")
    if node_type == "TEXT":
        return "Text"
    if node_type in SHAPE_TYPES:
        return "Shape"

    # Must run before the layout rules: an auto-layout frame holding only an image is still an Image
    if has_image_fill(node) and not has_text_descendant(node):
        return "Image"

    if node.get("layoutMode") == "HORIZONTAL":
        return "HStack"
    if node.get("layoutMode") == "VERTICAL":
        return "VStack"

    if node_type in COMPONENT_TYPES:
        return "Component"
    if node_type in CONTAINER_TYPES:
        return "Frame"
    return "View"


# Attribute helpers

def rgba_to_hex(color: dict) -> str:
    r = round(color.get("r", 0) * 255)
    g = round(color.get("g", 0) * 255)
    b = round(color.get("b", 0) * 255)
    hex_color = "#{:02x}{:02x}{:02x}".format(r, g, b)
    alpha = color.get("a", 1)
    if alpha < 1:
        hex_color += "{:02x}".format(round(alpha * 255))
    return hex_color


def get_solid_fill(node: dict):
    """First solid fill of the node as hex, or None."""
    fills = node.get("fills")
    if not isinstance(fills, list):
        return None
    for fill in fills:
        if isinstance(fill, dict) and fill.get("type") == "SOLID" and fill.get("color"):
            return rgba_to_hex(fill["color"])
    return None


def get_corner_radius(node: dict):
    radius = node.get("cornerRadius")
    if radius and 0 < radius < MAX_CORNER_RADIUS:
        return radius
    return None


def get_opacity(node: dict):
    opacity = node.get("opacity")
    if opacity is not None and opacity < 1:
        return math.floor(opacity * 100 + 0.5) / 100
    return None


def get_padding(node: dict):
    padding = {
        "top": node.get("paddingTop"),
        "right": node.get("paddingRight"),
        "bottom": node.get("paddingBottom"),
        "left": node.get("paddingLeft"),
    }
    padding = {k: v for k, v in padding.items() if v}
    return padding or None


def get_size(node: dict) -> dict:
    bbox = node.get("absoluteBoundingBox")
    if not isinstance(bbox, dict):
        return {}
    return {"width": round(bbox.get("width", 0)), "height": round(bbox.get("height", 0))}


def is_generic_name(name: str) -> bool:
    name = name.lower()
    return name in GENERIC_NAMES or name.startswith(GENERIC_PREFIXES)


def is_meaningful_wrapper(node: dict) -> bool:
    fill = get_solid_fill(node)
    return (
        (fill is not None and fill not in DEFAULT_FILLS)
        or get_corner_radius(node) is not None
        or get_opacity(node) is not None
    )


# Recursive compressor

def compress_text(node: dict):
    content = (node.get("characters") or "").strip()
    if not content:
        return None

    icon = SF_SYMBOLS.get(content)
    if icon:
        return {"name": node.get("name", ""), "type": "Icon", "icon": icon}

    slim = {"name": node.get("name", ""), "type": "Text", "content": content}
    fill = get_solid_fill(node)
    if fill and fill not in DEFAULT_INKS:
        slim["fill"] = fill
    return slim


def compress_node(node: dict, depth: int = 0, is_root: bool = False, max_depth: int = MAX_DEPTH):
    """
    Reduce a raw Figma node into a slim node, or None when it carries nothing
    a code generator can use. Children are compressed before the node itself so
    that flattening sees the already-filtered child list.
    """
    if not isinstance(node, dict) or depth > max_depth:
        return None
    if is_decorative(node) or is_empty_leaf(node):
        return None

    if node.get("type") == "TEXT":
        return compress_text(node)

    children = []
    for child in node.get("children") or []:
        slim_child = compress_node(child, depth + 1, max_depth=max_depth)
        if slim_child:
            children.append(slim_child)

    if not children and node.get("type") not in SHAPE_TYPES:
        if not has_image_fill(node):
            return None
        image = {"name": node.get("name", ""), "type": "Image"}
        image.update(get_size(node))
        radius = get_corner_radius(node)
        if radius:
            image["cornerRadius"] = radius
        return image

    # Unwrap single-child wrappers that add no visible styling
    if len(children) == 1 and not is_root and not is_meaningful_wrapper(node):
        child = children[0]
        name = node.get("name", "")
        if is_generic_name(name):
            return child
        return {**child, "name": name}

    node_type = classify_type(node)
    slim = {"name": node.get("name", ""), "type": node_type}

    fill = get_solid_fill(node)
    if fill and fill not in DEFAULT_FILLS:
        slim["fill"] = fill

    radius = get_corner_radius(node)
    if radius:
        slim["cornerRadius"] = radius

    opacity = get_opacity(node)
    if opacity is not None:
        slim["opacity"] = opacity

    # Spacing and padding only matter on stacks
    if node_type in ("HStack", "VStack"):
        if node.get("itemSpacing"):
            slim["spacing"] = node["itemSpacing"]
        padding = get_padding(node)
        if padding:
            slim["padding"] = padding

    if node_type == "Image" or is_root:
        slim.update(get_size(node))

    if children:
        slim["children"] = children

    return slim


# Tokens and assembly

def extract_tokens(styles) -> dict:
    if not isinstance(styles, dict):
        return {}
    return {k: v for k, v in styles.items() if isinstance(v, str)}


def assemble_tree(root: dict, compressed, styles=None) -> dict:
    size = get_size(root)
    if compressed and compressed.get("children"):
        components = compressed["children"]
    elif compressed:
        components = [compressed]
    else:
        components = []

    return {
        "screen": root.get("name", ""),
        "width": size.get("width", 0),
        "height": size.get("height", 0),
        "components": components,
        "tokens": extract_tokens(styles),
    }


def compress_tree(root: dict, styles=None, max_depth: int = MAX_DEPTH) -> dict:
    compressed = compress_node(root, 0, is_root=True, max_depth=max_depth)
    return assemble_tree(root, compressed, styles)


def count_nodes(nodes) -> int:
    return sum(1 + count_nodes(n.get("children") or []) for n in nodes)


def to_json(tree: dict) -> str:
    return json.dumps(tree, indent=2, ensure_ascii=False)
