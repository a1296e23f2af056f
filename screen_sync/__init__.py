"""
screen-sync — 視覺畫布 ↔ 原始碼雙向同步引擎

畫布、屬性面板、文字編輯器三個視圖共用同一份 Screen 原始碼。
"""

__version__ = "0.1.0"

from .jsx_codec import (
    JSXSyntaxError,
    ParseFailure,
    SyntaxTree,
    parse,
    print_tree,
    walk,
)
from .element_locator import find_by_id
from .code_patcher import PropertyEncoder, extract_properties, merge_properties
from .components import ComponentNode, ComponentType, ComponentVocabulary, generate_component_id
from .component_discovery import discover_components
from .screens import Screen, ScreenCollection, ScreenError
from .editor import BufferEditor, FileEditor, TextEditor
from .coordinator import DesignerState, Provenance, Selection, SyncCoordinator, SyncEvent
from .config import load_config, validate_config

__all__ = [
    "__version__",
    "JSXSyntaxError",
    "ParseFailure",
    "SyntaxTree",
    "parse",
    "print_tree",
    "walk",
    "find_by_id",
    "PropertyEncoder",
    "extract_properties",
    "merge_properties",
    "ComponentNode",
    "ComponentType",
    "ComponentVocabulary",
    "generate_component_id",
    "discover_components",
    "Screen",
    "ScreenCollection",
    "ScreenError",
    "BufferEditor",
    "FileEditor",
    "TextEditor",
    "DesignerState",
    "Provenance",
    "Selection",
    "SyncCoordinator",
    "SyncEvent",
    "load_config",
    "validate_config",
]
