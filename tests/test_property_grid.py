"""
屬性面板單元測試：列出可編輯屬性、輸入值轉型、元件清單預覽。
"""
import pytest

from screen_sync.components import ComponentNode
from screen_sync.property_grid import coerce_input, input_kind_for, preview_component_list, property_rows


def make_node():
    return ComponentNode("b1", "Button", {
        "id": "b1",
        "children": "Save",
        "disabled": False,
        "width": 120,
        "class": "btn",
    })


def test_rows_exclude_id():
    rows = property_rows(make_node())
    assert [r.name for r in rows] == ["children", "disabled", "width", "class"]
    assert [r.input_kind for r in rows] == ["text", "checkbox", "number", "text"]


def test_rows_without_selection():
    assert property_rows(None) == []


@pytest.mark.parametrize("value, kind", [
    (True, "checkbox"),
    (0, "number"),
    (1.5, "number"),
    ("x", "text"),
    (None, "text"),
])
def test_input_kind_for(value, kind):
    assert input_kind_for(value) == kind


class TestCoerceInput:
    @pytest.mark.parametrize("raw, expected", [
        ("true", True),
        ("on", True),
        ("false", False),
        ("", False),
        (True, True),
        (0, False),
    ])
    def test_checkbox(self, raw, expected):
        assert coerce_input("checkbox", raw) is expected

    def test_number(self):
        assert coerce_input("number", "12") == 12
        assert isinstance(coerce_input("number", "12"), int)
        assert coerce_input("number", "2.5") == 2.5
        assert coerce_input("number", 3.0) == 3

    @pytest.mark.parametrize("raw", ["abc", "", None, True, "nan"])
    def test_number_rejects(self, raw):
        with pytest.raises(ValueError):
            coerce_input("number", raw)

    def test_text(self):
        assert coerce_input("text", 5) == "5"
        assert coerce_input("text", None) == ""

    def test_unknown_kind(self):
        with pytest.raises(ValueError, match="checkbox, number, text"):
            coerce_input("color", "#fff")


def test_preview_marks_selection():
    other = ComponentNode("b2", "Button", {"id": "b2"})
    output = preview_component_list([make_node(), other], selected_id="b1")
    lines = output.splitlines()
    assert lines[0] == '▶ b1  [Button]  "Save"'
    assert "     disabled = False" in lines
    assert lines[-1] == "├─ b2  [Button]"
