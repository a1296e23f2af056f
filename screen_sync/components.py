"""
元件詞彙與 Toolbox

typeTag（畫布上的元件型別，如 Button）↔ 標記 tag（如 button）的對應，
以及拖放來源的預設屬性。
"""

import random
import string
from dataclasses import dataclass, field
from typing import Optional

_BASE36 = string.digits + string.ascii_lowercase


@dataclass
class ComponentNode:
    """畫布上的一個元件；id 必須以字面屬性存在於原始碼中."""
    id: str
    type_tag: str
    properties: dict = field(default_factory=dict)


@dataclass
class ComponentType:
    type_tag: str
    tag: str
    label: str = ""
    default_props: dict = field(default_factory=dict)


BUILTIN_TYPES = [
    ComponentType(
        type_tag="Button",
        tag="button",
        label="Button",
        default_props={
            "children": "Button",
            "onClick": "() => console.log('Button clicked')",
            "class": "btn",
            "disabled": False,
        },
    ),
]


class ComponentVocabulary:
    """可辨識的元件型別集合（可由設定檔擴充）."""

    def __init__(self, types: Optional[list] = None):
        self._by_type: dict[str, ComponentType] = {}
        self._by_tag: dict[str, ComponentType] = {}
        for component_type in BUILTIN_TYPES if types is None else types:
            self.register(component_type)

    def register(self, component_type: ComponentType) -> None:
        self._by_type[component_type.type_tag] = component_type
        self._by_tag[component_type.tag] = component_type

    def by_type(self, type_tag: str) -> Optional[ComponentType]:
        return self._by_type.get(type_tag)

    def by_tag(self, tag: str) -> Optional[ComponentType]:
        return self._by_tag.get(tag)

    @property
    def types(self) -> list:
        return list(self._by_type.values())

    @classmethod
    def from_config(cls, config: dict) -> "ComponentVocabulary":
        vocabulary = cls()
        extra = config.get("components", {}).get("vocabulary", {})
        if isinstance(extra, dict):
            for type_tag, tag in extra.items():
                if isinstance(tag, str) and tag:
                    vocabulary.register(ComponentType(type_tag=type_tag, tag=tag, label=type_tag))
        return vocabulary


def generate_component_id(prefix: str = "comp-", existing=()) -> str:
    """產生 prefix + 9 碼 base36 的 id，避開 existing."""
    while True:
        candidate = prefix + "".join(random.choices(_BASE36, k=9))
        if candidate not in existing:
            return candidate


def drop_payload(component_type: ComponentType, properties: Optional[dict] = None) -> dict:
    """拖放落點收到的屬性：型別預設值再疊上 payload."""
    props = dict(component_type.default_props)
    props.update(properties or {})
    return props
