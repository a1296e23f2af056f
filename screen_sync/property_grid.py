"""屬性面板：列出選取元件的可編輯屬性，並把輸入值轉回型別."""

from dataclasses import dataclass
from typing import Any, Optional

INPUT_KINDS = ("checkbox", "number", "text")


@dataclass
class PropertyRow:
    name: str
    value: Any
    input_kind: str


def input_kind_for(value: Any) -> str:
    if isinstance(value, bool):
        return "checkbox"
    if isinstance(value, (int, float)):
        return "number"
    return "text"


def property_rows(node) -> list:
    """id 不可編輯，不列出."""
    if node is None:
        return []
    return [
        PropertyRow(name, value, input_kind_for(value))
        for name, value in node.properties.items()
        if name != "id"
    ]


def coerce_input(input_kind: str, raw: Any) -> Any:
    """checkbox → bool、number → 數字（整數值回傳 int）、其餘 → 字串."""
    if input_kind == "checkbox":
        if isinstance(raw, str):
            return raw.strip().lower() in ("1", "true", "on", "yes")
        return bool(raw)
    if input_kind == "number":
        if isinstance(raw, bool):
            raise ValueError(f"{raw!r} is not a number")
        try:
            number = float(raw)
        except TypeError:
            raise ValueError(f"{raw!r} is not a number") from None
        if number != number:
            raise ValueError(f"{raw!r} is not a number")
        return int(number) if number.is_integer() else number
    if input_kind == "text":
        return "" if raw is None else str(raw)
    raise ValueError(f"unknown input kind '{input_kind}' (expected one of: {', '.join(INPUT_KINDS)})")


def preview_component_list(components: list, selected_id: Optional[str] = None) -> str:
    """除錯用：印出畫布元件清單."""
    lines = []
    for node in components:
        marker = "▶" if node.id == selected_id else "├─"
        label = f"{marker} {node.id}  [{node.type_tag}]"
        text = node.properties.get("children")
        if text:
            label += f"  \"{text}\""
        lines.append(label)
        for name, value in node.properties.items():
            if name in ("id", "children"):
                continue
            lines.append(f"     {name} = {value!r}")
    return "\n".join(lines)
