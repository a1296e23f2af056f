"""依穩定 id 在元素樹中找元素."""

from typing import Optional

from .jsx_codec import Element, SyntaxTree, walk


def literal_id(el: Element) -> Optional[str]:
    # 只認字面字串 id="…"，id={expr} 不視為身分
    for attr in el.attributes:
        if attr.name == "id":
            return attr.text if attr.kind == "string" else None
    return None


def find_by_id(tree: SyntaxTree, element_id: str) -> Optional[Element]:
    """深度優先掃描，回傳第一個（文件順序）id 相符的元素；重複 id 不修復."""
    for handle in walk(tree):
        el = tree.element(handle)
        if literal_id(el) == element_id:
            return el
    return None


def find_all_by_id(tree: SyntaxTree, element_id: str) -> list:
    return [tree.element(h) for h in walk(tree) if literal_id(tree.element(h)) == element_id]


def collect_ids(tree: SyntaxTree) -> set:
    ids = set()
    for handle in walk(tree):
        element_id = literal_id(tree.element(handle))
        if element_id:
            ids.add(element_id)
    return ids
