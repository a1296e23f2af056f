"""
Code Patcher — 將屬性變更回寫到 JSX 元素

ComponentNode 的 properties 與元素屬性之間的雙向對應：
  merge_properties：properties → 元素（原地、最小修改）
  extract_properties：元素 → properties
"""

import json
import math
import re
from typing import Any, Optional

from .jsx_codec import (
    Attribute,
    Element,
    JSXSyntaxError,
    SyntaxTree,
    TextNode,
    element_text,
    set_element_text,
)

_ATTR_NAME_RE = re.compile(r"^[A-Za-z_$][\w$:\-]*$")
_FUNCTION_TOKEN_RE = re.compile(r"=>|\bfunction\b")
_NUMBER_LITERAL_RE = re.compile(r"^-?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?$")
_HEX_LITERAL_RE = re.compile(r"^0[xX][0-9a-fA-F]+$")

RESERVED_PROPS = ("id", "children")


def _warn(msg: str) -> None:
    print(f"   ⚠️  [patcher] {msg}")


class PropertyEncoder:
    """properties 值 ↔ JSX 屬性值的轉換規則."""

    @staticmethod
    def is_event_handler(name: str, value: str, event_prefix: str = "on") -> bool:
        return name.startswith(event_prefix) and bool(_FUNCTION_TOKEN_RE.search(value))

    @staticmethod
    def format_number(value) -> str:
        if isinstance(value, int):
            return str(value)
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        if value.is_integer():
            return str(int(value))
        return repr(value)

    @staticmethod
    def pick_quote(value: str) -> Optional[str]:
        """JSX 字串不能跳脫；兩種引號都出現時回傳 None."""
        if '"' not in value:
            return '"'
        if "'" not in value:
            return "'"
        return None

    @staticmethod
    def literal_source(value: Any) -> str:
        return json.dumps(value, ensure_ascii=False)

    @staticmethod
    def decode_expression(source: str) -> Any:
        """布林 / 數字常值解開，其餘回傳原始碼字串（不求值）."""
        source = source.strip()
        if source == "true":
            return True
        if source == "false":
            return False
        if _NUMBER_LITERAL_RE.match(source):
            number = float(source)
            if re.match(r"^-?\d+$", source):
                return int(source)
            return number
        if _HEX_LITERAL_RE.match(source):
            return int(source, 16)
        return source


def encode_attribute(
    tree: SyntaxTree, name: str, value: Any, event_prefix: str = "on"
) -> Attribute:
    """依值型別產生屬性；無法編碼時拋出 ValueError / TypeError."""
    if not _ATTR_NAME_RE.match(name):
        raise ValueError(f"'{name}' is not a valid attribute name")
    if value is True:
        return Attribute(name=name, kind="bare")
    if value is False:
        return Attribute(name=name, kind="expression", parts=["false"])
    if isinstance(value, (int, float)):
        return Attribute(name=name, kind="expression",
                         parts=[PropertyEncoder.format_number(value)])
    if isinstance(value, str):
        if PropertyEncoder.is_event_handler(name, value, event_prefix):
            try:
                return Attribute(name=name, kind="expression",
                                 parts=tree.parse_expression(value))
            except JSXSyntaxError as e:
                _warn(f"'{name}' handler is not a valid expression ({e}); stored as a string")
        quote = PropertyEncoder.pick_quote(value)
        if quote:
            return Attribute(name=name, kind="string", quote=quote, text=value)
    return Attribute(name=name, kind="expression",
                     parts=tree.parse_expression(PropertyEncoder.literal_source(value)))


def _encode_or_warn(tree, name, value, event_prefix) -> Optional[Attribute]:
    try:
        return encode_attribute(tree, name, value, event_prefix)
    except (TypeError, ValueError) as e:
        _warn(f"skip property '{name}': {e}")
        return None


def merge_properties(
    tree: SyntaxTree, element: Element, props: dict, event_prefix: str = "on"
) -> list:
    """把 props 原地合併進元素，回傳有變動的屬性名稱.

    id 永遠保留原值且只留第一個；children 取代文字內容；
    props 未提及的屬性保持原樣與原本的相對位置。
    """
    incoming = {k: v for k, v in props.items() if k not in RESERVED_PROPS}
    changed = []
    kept = []
    seen_id = False
    replaced = set()

    for attr in element.attributes:
        if attr.name == "id":
            if seen_id:
                changed.append("id")
                continue
            seen_id = True
            kept.append(attr)
            continue
        if attr.name not in incoming:
            kept.append(attr)
            continue
        if attr.name in replaced:
            # 同名重複屬性：已由第一個承接新值
            changed.append(attr.name)
            continue
        replaced.add(attr.name)
        value = incoming[attr.name]
        current = attribute_value(tree, attr)
        if type(current) is type(value) and current == value:
            kept.append(attr)
            continue
        encoded = _encode_or_warn(tree, attr.name, value, event_prefix)
        if encoded is None:
            kept.append(attr)
            continue
        encoded.leading = attr.leading
        if encoded.kind != "bare" and attr.kind != "bare":
            encoded.eq = attr.eq
        if tree.render_attribute(encoded) == tree.render_attribute(attr):
            kept.append(attr)
            continue
        kept.append(encoded)
        changed.append(attr.name)

    leading = kept[-1].leading if kept and "\n" in kept[-1].leading else " "
    for name, value in incoming.items():
        if name in replaced:
            continue
        encoded = _encode_or_warn(tree, name, value, event_prefix)
        if encoded is None:
            continue
        encoded.leading = leading
        kept.append(encoded)
        changed.append(name)

    element.attributes = kept

    if "children" in props:
        value = props["children"]
        text = "" if value is None else str(value)
        if element_text(tree, element) != text.strip():
            set_element_text(tree, element, text)
            changed.append("children")
    return changed


def attribute_value(tree: SyntaxTree, attr: Attribute) -> Any:
    if attr.kind == "bare":
        return True
    if attr.kind == "string":
        return attr.text
    try:
        source = tree.render_parts(attr.parts)
    except KeyError:
        # 片段指向已不存在的元素：退回原始文字
        source = attr.source[len(attr.name) + len(attr.eq) + 1:-1]
    return PropertyEncoder.decode_expression(source)


def extract_properties(tree: SyntaxTree, element: Element) -> dict:
    """元素屬性 → properties；同名屬性以第一個為準."""
    props = {}
    for attr in element.attributes:
        if not attr.name or attr.name in props:
            continue
        props[attr.name] = attribute_value(tree, attr)
    text = element_text(tree, element)
    if text:
        props["children"] = text
    return props


def create_element(
    tree: SyntaxTree, tag: str, element_id: str, props: dict, event_prefix: str = "on"
) -> Element:
    """合成新元素：id 置首，其餘屬性依 props 順序."""
    el = tree.new_element(tag)
    el.attributes = [Attribute(name="id", kind="string", text=element_id)]
    merge_properties(tree, el, props, event_prefix)
    return el


def insert_child(tree: SyntaxTree, parent: Element, child: Element) -> None:
    """將元素附加為 parent 的最後一個子元素，沿用既有的換行縮排."""
    child.parent = parent.handle
    if parent.self_closing:
        parent.tail = parent.tail[:-2].rstrip() + ">"
        parent.closing = f"</{parent.tag}>"
    children = parent.children
    last = children[-1] if children else None
    if isinstance(last, TextNode) and "\n" in last.raw and not last.raw.strip():
        first = children[0]
        if isinstance(first, TextNode) and "\n" in first.raw and not first.raw.strip() and first is not last:
            separator = first.raw
        else:
            separator = last.raw + "  "
        children[-1:] = [TextNode(separator), child.handle, last]
    else:
        children.append(child.handle)
