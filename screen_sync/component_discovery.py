"""從元素樹重建整份畫布元件清單."""

from typing import Optional

from .code_patcher import extract_properties
from .components import ComponentNode, ComponentVocabulary, generate_component_id
from .element_locator import collect_ids, literal_id
from .jsx_codec import SyntaxTree, walk


def _warn(msg: str) -> None:
    print(f"   ⚠️  [discovery] {msg}")


def discover_components(
    tree: SyntaxTree,
    vocabulary: Optional[ComponentVocabulary] = None,
    id_prefix: str = "comp-",
) -> list:
    """依文件順序掃描可辨識的元素並轉成 ComponentNode.

    缺 id 的元素在記憶體中配發新 id（不回寫原始碼）；
    重複 id 以第一個出現者為準，其餘捨棄。
    """
    vocabulary = vocabulary or ComponentVocabulary()
    taken = collect_ids(tree)
    seen = set()
    nodes = []
    for handle in walk(tree):
        el = tree.element(handle)
        component_type = vocabulary.by_tag(el.tag)
        if component_type is None:
            continue
        props = extract_properties(tree, el)
        component_id = literal_id(el)
        if not component_id:
            component_id = generate_component_id(id_prefix, taken)
            taken.add(component_id)
            props = {"id": component_id, **{k: v for k, v in props.items() if k != "id"}}
        if component_id in seen:
            _warn(f"duplicate id '{component_id}' on <{el.tag}>, keeping the first one")
            continue
        seen.add(component_id)
        nodes.append(ComponentNode(component_id, component_type.type_tag, props))
    return nodes
