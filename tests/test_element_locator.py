"""
Element Locator 單元測試
重點：文件順序第一個相符者勝出；重複 id 容忍但不修復。
"""
from screen_sync.element_locator import collect_ids, find_all_by_id, find_by_id
from screen_sync.jsx_codec import element_text, parse, print_tree


DUPLICATES = '<div><button id="x">A</button><span><button id="x">B</button></span></div>'


def test_finds_nested_element():
    tree = parse('<div><section><button id="save">Save</button></section></div>')
    el = find_by_id(tree, "save")
    assert el is not None
    assert el.tag == "button"


def test_missing_id_returns_none():
    tree = parse('<div><button id="a"/></div>')
    assert find_by_id(tree, "zzz") is None


def test_first_document_order_match_wins():
    tree = parse(DUPLICATES)
    el = find_by_id(tree, "x")
    assert element_text(tree, el) == "A"


def test_duplicates_are_tolerated_not_repaired():
    tree = parse(DUPLICATES)
    assert len(find_all_by_id(tree, "x")) == 2
    find_by_id(tree, "x")
    # 查找不改動樹
    assert print_tree(tree) == DUPLICATES


def test_outer_element_precedes_inner_with_same_id():
    tree = parse('<div id="x"><button id="x"/></div>')
    assert find_by_id(tree, "x").tag == "div"


def test_finds_element_inside_expression_container():
    tree = parse('<div>{open && <button id="y">Go</button>}</div>')
    assert find_by_id(tree, "y").tag == "button"


def test_expression_id_is_not_an_identity():
    tree = parse('<div><button id={"x"}/></div>')
    assert find_by_id(tree, "x") is None


def test_first_id_attribute_is_the_identity():
    tree = parse('<button id="a" id="b"/>')
    assert find_by_id(tree, "a") is not None
    assert find_by_id(tree, "b") is None


def test_collect_ids():
    tree = parse(DUPLICATES.replace("<span>", '<span id="s">'))
    assert collect_ids(tree) == {"x", "s"}
