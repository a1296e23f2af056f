"""
Attribute Merge / Extract 單元測試
涵蓋各型別編碼規則、id 保留與去重、children 取代、未提及屬性保持原位。
"""
import pytest

from screen_sync.code_patcher import (
    PropertyEncoder,
    create_element,
    extract_properties,
    insert_child,
    merge_properties,
)
from screen_sync.jsx_codec import parse, print_tree


def merged(source, props, event_prefix="on"):
    tree = parse(source)
    el = tree.element(tree.roots[0])
    merge_properties(tree, el, props, event_prefix)
    return print_tree(tree)


def extracted(source):
    tree = parse(source)
    return extract_properties(tree, tree.element(tree.roots[0]))


# ─── merge：保留未提及屬性 ─────────────────────────────────────────────────

class TestMergePreservesAttributes:
    def test_unmatched_attribute_untouched(self):
        text = merged('<button a={1} b={2} id="x"></button>', {"b": 3})
        assert text == '<button a={1} b={3} id="x"></button>'
        assert extracted(text) == {"id": "x", "a": 1, "b": 3}

    def test_new_attribute_appended_at_end(self):
        text = merged('<button id="x" class="a"></button>', {"title": "t"})
        assert text == '<button id="x" class="a" title="t"></button>'

    def test_unchanged_value_keeps_original_formatting(self):
        source = '<button id="x" size = {  3  }></button>'
        assert merged(source, {"size": 3}) == source

    def test_multiline_attributes_keep_layout(self):
        source = '<button\n  id="x"\n  class="a"\n>Go</button>'
        text = merged(source, {"title": "t"})
        assert text == '<button\n  id="x"\n  class="a"\n  title="t"\n>Go</button>'

    def test_spread_attribute_retained(self):
        text = merged('<button id="x" {...rest}></button>', {"class": "c"})
        assert text == '<button id="x" {...rest} class="c"></button>'


# ─── merge：id 規則 ─────────────────────────────────────────────────────────

class TestMergeIdRules:
    def test_incoming_id_is_ignored(self):
        text = merged('<button id="x"></button>', {"id": "other"})
        assert text == '<button id="x"></button>'

    def test_duplicate_id_attributes_collapsed_to_first(self):
        text = merged('<button id="x" id="x" class="a"></button>', {"class": "b"})
        assert text == '<button id="x" class="b"></button>'
        assert text.count('id="x"') == 1

    def test_duplicate_id_removed_even_with_empty_props(self):
        text = merged('<button id="x" title="t" id="y"></button>', {})
        assert text == '<button id="x" title="t"></button>'

    def test_duplicate_named_attribute_takes_new_value_once(self):
        text = merged('<button id="x" class="a" class="b"></button>', {"class": "c"})
        assert text == '<button id="x" class="c"></button>'


# ─── merge：型別編碼 ────────────────────────────────────────────────────────

class TestMergeEncoding:
    def test_true_is_presence_only(self):
        assert merged('<button id="x" disabled={false}></button>', {"disabled": True}) == \
            '<button id="x" disabled></button>'

    def test_false_is_explicit_expression(self):
        assert merged('<button id="x" disabled></button>', {"disabled": False}) == \
            '<button id="x" disabled={false}></button>'

    def test_explicit_false_survives_extraction(self):
        text = merged('<button id="x"></button>', {"disabled": False})
        props = extracted(text)
        assert "disabled" in props
        assert props["disabled"] is False

    @pytest.mark.parametrize("value,expected", [
        (10, "{10}"),
        (1.5, "{1.5}"),
        (2.0, "{2}"),
        (-3, "{-3}"),
    ])
    def test_numbers(self, value, expected):
        assert merged('<input id="x"/>', {"width": value}) == f'<input id="x" width={expected}/>'

    def test_event_handler_with_arrow_is_expression(self):
        text = merged('<button id="x"></button>', {"onClick": "() => alert(1)"})
        assert text == '<button id="x" onClick={() => alert(1)}></button>'
        assert extracted(text)["onClick"] == "() => alert(1)"

    def test_event_handler_with_function_keyword_is_expression(self):
        text = merged('<button id="x"></button>', {"onClick": "function () { go(); }"})
        assert 'onClick={function () { go(); }}' in text

    def test_event_name_without_function_token_is_string(self):
        text = merged('<button id="x"></button>', {"onClick": "handleClick"})
        assert 'onClick="handleClick"' in text

    def test_arrow_text_on_non_event_is_string(self):
        text = merged('<button id="x"></button>', {"title": "a => b"})
        assert 'title="a => b"' in text

    def test_custom_event_prefix(self):
        text = merged('<button id="x"></button>', {"handleTap": "() => 1"}, event_prefix="handle")
        assert "handleTap={() => 1}" in text

    def test_invalid_handler_falls_back_to_string(self, capsys):
        text = merged('<button id="x"></button>', {"onClick": "() => {"})
        assert 'onClick="() => {"' in text
        assert "[patcher]" in capsys.readouterr().out

    def test_string_with_double_quotes_uses_single_quotes(self):
        text = merged('<button id="x"></button>', {"title": 'say "hi"'})
        assert "title='say \"hi\"'" in text

    def test_string_with_both_quotes_becomes_expression(self):
        text = merged('<button id="x"></button>', {"title": "it's \"x\""})
        assert 'title={"it\'s \\"x\\""}' in text

    def test_structured_value_is_json_expression(self):
        text = merged('<div id="x"></div>', {"style": {"color": "red"}})
        assert text == '<div id="x" style={{"color": "red"}}></div>'

    def test_none_is_null_expression(self):
        assert 'data={null}' in merged('<div id="x"></div>', {"data": None})

    def test_unencodable_value_is_skipped(self, capsys):
        text = merged('<div id="x"></div>', {"data": object(), "title": "ok"})
        assert text == '<div id="x" title="ok"></div>'
        assert "skip property 'data'" in capsys.readouterr().out

    def test_invalid_attribute_name_is_skipped(self, capsys):
        text = merged('<div id="x"></div>', {"bad name": 1})
        assert text == '<div id="x"></div>'
        assert "bad name" in capsys.readouterr().out


# ─── merge：children ────────────────────────────────────────────────────────

class TestMergeChildren:
    def test_children_replaces_text(self):
        assert merged('<button id="x">Old</button>', {"children": "New"}) == \
            '<button id="x">New</button>'

    def test_children_never_written_as_attribute(self):
        assert "children=" not in merged('<button id="x">Old</button>', {"children": "New"})

    def test_same_children_keeps_formatting(self):
        source = '<button id="x">\n  Click\n</button>'
        text = merged(source, {"children": "Click", "disabled": True})
        assert text == '<button id="x" disabled>\n  Click\n</button>'

    def test_children_on_self_closing_element(self):
        assert merged('<button id="x" />', {"children": "Go"}) == '<button id="x">Go</button>'


# ─── extract ────────────────────────────────────────────────────────────────

class TestExtract:
    def test_value_kinds(self):
        props = extracted(
            '<button id="x" disabled flag={false} n={42} f={-1.5} h={0x1F} '
            'expr={count() + 1} label="Hi">  Text  </button>'
        )
        assert props == {
            "id": "x",
            "disabled": True,
            "flag": False,
            "n": 42,
            "f": -1.5,
            "h": 31,
            "expr": "count() + 1",
            "label": "Hi",
            "children": "Text",
        }

    def test_whitespace_only_text_has_no_children(self):
        assert "children" not in extracted('<button id="x">\n   \n</button>')

    def test_spread_is_ignored(self):
        assert extracted('<button {...rest} id="x"/>') == {"id": "x"}

    def test_first_duplicate_wins(self):
        assert extracted('<button id="a" id="b"/>') == {"id": "a"}

    def test_structured_value_returned_as_source_text(self):
        assert extracted('<div style={{"color": "red"}}/>')["style"] == '{"color": "red"}'


# ─── PropertyEncoder ────────────────────────────────────────────────────────

def test_decode_expression_literals():
    assert PropertyEncoder.decode_expression(" true ") is True
    assert PropertyEncoder.decode_expression("7") == 7
    assert PropertyEncoder.decode_expression("1e3") == 1000.0
    assert PropertyEncoder.decode_expression("a.b") == "a.b"


def test_format_number_special_values():
    assert PropertyEncoder.format_number(float("inf")) == "Infinity"
    assert PropertyEncoder.format_number(float("nan")) == "NaN"


def test_is_event_handler():
    assert PropertyEncoder.is_event_handler("onClick", "() => 1")
    assert not PropertyEncoder.is_event_handler("onClick", "run")
    assert not PropertyEncoder.is_event_handler("click", "() => 1")


# ─── create / insert ────────────────────────────────────────────────────────

def test_create_and_insert_into_self_closing_parent():
    tree = parse("<div />")
    el = create_element(tree, "button", "comp-1", {"id": "ignored", "children": "Go", "disabled": False})
    insert_child(tree, tree.element(tree.roots[0]), el)
    assert print_tree(tree) == '<div><button id="comp-1" disabled={false}>Go</button></div>'


def test_insert_follows_existing_indentation():
    tree = parse("<div>\n  <p>a</p>\n</div>")
    el = create_element(tree, "button", "comp-1", {})
    insert_child(tree, tree.element(tree.roots[0]), el)
    assert print_tree(tree) == '<div>\n  <p>a</p>\n  <button id="comp-1"></button>\n</div>'
