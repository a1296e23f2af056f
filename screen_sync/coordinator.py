"""
Synchronization Coordinator — 畫布 / 屬性面板 / 文字編輯器三方同步

所有對 Screen.source_text 的寫入都經過這裡。每次接受變更時記錄來源
（Provenance），再依來源決定要更新哪些視圖：

  text-editor                → 重新 discover 畫布清單，不回寫編輯器
  visual-canvas / property-editor → 不 discover，把新原始碼推回編輯器
  initial（載入 / 切換 Screen） → 兩者都做

變更以事件排入佇列依序套用；套用途中再進來的變更（例如編輯器的
change callback）會排隊，不會交錯執行。
"""

import dataclasses
from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from .code_patcher import create_element, insert_child, merge_properties
from .component_discovery import discover_components
from .components import ComponentNode, ComponentVocabulary, drop_payload, generate_component_id
from .element_locator import collect_ids, find_by_id
from .jsx_codec import parse, print_tree
from .property_grid import coerce_input, property_rows
from .screens import ScreenCollection, ScreenError


def _warn(msg: str) -> None:
    print(f"   ⚠️  [sync] {msg}")


class Provenance(str, Enum):
    INITIAL = "initial"
    VISUAL_CANVAS = "visual-canvas"
    PROPERTY_EDITOR = "property-editor"
    TEXT_EDITOR = "text-editor"


@dataclass
class Selection:
    """以 id 弱參照目前畫布清單中的元件；id 消失時視為未選取."""
    component_id: Optional[str] = None

    def resolve(self, components: list) -> Optional[ComponentNode]:
        if self.component_id is None:
            return None
        for node in components:
            if node.id == self.component_id:
                return node
        return None

    def clear(self) -> None:
        self.component_id = None


@dataclass
class DesignerState:
    screens: ScreenCollection = field(default_factory=ScreenCollection)
    active_screen_id: str = ""
    components: list = field(default_factory=list)
    selection: Selection = field(default_factory=Selection)
    provenance: dict = field(default_factory=dict)

    def __post_init__(self):
        if self.active_screen_id not in self.screens:
            self.active_screen_id = self.screens.first.id


# ─── mutation events ────────────────────────────────────────────────────


@dataclass
class CanvasAdd:
    type_tag: str
    properties: dict = field(default_factory=dict)


@dataclass
class PropertyEdit:
    name: str
    value: Any


@dataclass
class TextEdit:
    text: str


@dataclass
class SwitchScreen:
    screen_id: str


@dataclass
class SyncEvent:
    """一次被接受的變更與其後續的視圖更新."""
    screen_id: str
    provenance: Provenance
    source_text: str
    rediscovered: bool = False
    pushed_to_editor: bool = False
    component_id: Optional[str] = None


class SyncCoordinator:
    def __init__(
        self,
        state: Optional[DesignerState] = None,
        editor=None,
        vocabulary: Optional[ComponentVocabulary] = None,
        event_prefix: str = "on",
        id_prefix: str = "comp-",
    ):
        self.state = state or DesignerState()
        self.editor = editor
        self.vocabulary = vocabulary or ComponentVocabulary()
        self.event_prefix = event_prefix
        self.id_prefix = id_prefix
        self._queue: deque = deque()
        self._draining = False
        self._listeners = []
        if editor is not None:
            editor.on_change(self._on_editor_change)
        self.dispatch(SwitchScreen(self.state.active_screen_id))

    @classmethod
    def from_config(cls, config: dict, state=None, editor=None) -> "SyncCoordinator":
        return cls(
            state=state,
            editor=editor,
            vocabulary=ComponentVocabulary.from_config(config),
            event_prefix=config.get("editor", {}).get("eventPrefix", "on"),
            id_prefix=config.get("components", {}).get("idPrefix", "comp-"),
        )

    # ─── 查詢 ───────────────────────────────────────────────────────────

    @property
    def active_screen(self):
        return self.state.screens.get(self.state.active_screen_id)

    @property
    def source_text(self) -> str:
        return self.active_screen.source_text

    @property
    def components(self) -> list:
        return self.state.components

    @property
    def provenance(self) -> Optional[Provenance]:
        return self.state.provenance.get(self.state.active_screen_id)

    @property
    def selected_component(self) -> Optional[ComponentNode]:
        return self.state.selection.resolve(self.state.components)

    def property_rows(self) -> list:
        return property_rows(self.selected_component)

    def subscribe(self, listener) -> None:
        self._listeners.append(listener)

    # ─── 選取 ───────────────────────────────────────────────────────────

    def select(self, component_id: Optional[str]) -> Optional[ComponentNode]:
        self.state.selection.component_id = component_id
        node = self.selected_component
        if node is None:
            self.state.selection.clear()
        return node

    # ─── 變更入口 ───────────────────────────────────────────────────────

    def add_component(self, type_tag: str, properties: Optional[dict] = None) -> Optional[ComponentNode]:
        """visual-canvas：拖放落點新增元件."""
        event = self.dispatch(CanvasAdd(type_tag, dict(properties or {})))
        if event is None or event.component_id is None:
            return None
        return self.state.selection.resolve(self.state.components)

    def edit_property(self, name: str, value: Any) -> bool:
        """property-editor：修改目前選取元件的單一屬性."""
        return self.dispatch(PropertyEdit(name, value)) is not None

    def edit_property_input(self, name: str, input_kind: str, raw) -> bool:
        try:
            value = coerce_input(input_kind, raw)
        except ValueError as e:
            _warn(f"ignored input for '{name}': {e}")
            return False
        return self.edit_property(name, value)

    def edit_text(self, text: str) -> bool:
        """text-editor：原樣接受使用者輸入的原始碼."""
        return self.dispatch(TextEdit(text)) is not None

    def switch_screen(self, screen_id: str) -> bool:
        return self.dispatch(SwitchScreen(screen_id)) is not None

    def dispatch(self, mutation) -> Optional[SyncEvent]:
        """排入變更並依序套用；若已在套用中則只排隊並回傳 None."""
        self._queue.append(mutation)
        if self._draining:
            return None
        self._draining = True
        result = None
        try:
            first = True
            while self._queue:
                event = self._apply(self._queue.popleft())
                if first:
                    result, first = event, False
        except Exception:
            # 中斷的批次不留到下一次 dispatch
            self._queue.clear()
            raise
        finally:
            self._draining = False
        return result

    def _on_editor_change(self, text: str) -> None:
        if text != self.source_text:
            self.edit_text(text)

    # ─── Screen 集合 ────────────────────────────────────────────────────

    def add_screen(self, name: str):
        try:
            return self.state.screens.add(name)
        except ScreenError as e:
            _warn(str(e))
            return None

    def rename_screen(self, screen_id: str, name: str) -> bool:
        try:
            self.state.screens.rename(screen_id, name)
        except (ScreenError, KeyError) as e:
            _warn(f"rename failed: {e}")
            return False
        return True

    def delete_screen(self, screen_id: str) -> bool:
        try:
            self.state.screens.delete(screen_id)
        except (ScreenError, KeyError) as e:
            _warn(f"delete failed: {e}")
            return False
        self.state.provenance.pop(screen_id, None)
        if self.state.active_screen_id == screen_id:
            self.dispatch(SwitchScreen(self.state.screens.first.id))
        return True

    # ─── 套用 ───────────────────────────────────────────────────────────

    def _apply(self, mutation) -> Optional[SyncEvent]:
        if isinstance(mutation, CanvasAdd):
            return self._apply_canvas_add(mutation)
        if isinstance(mutation, PropertyEdit):
            return self._apply_property_edit(mutation)
        if isinstance(mutation, TextEdit):
            return self._apply_text_edit(mutation)
        if isinstance(mutation, SwitchScreen):
            return self._apply_switch_screen(mutation)
        raise TypeError(f"unknown mutation {mutation!r}")

    def _parse_active(self):
        tree = parse(self.source_text)
        if not tree:
            _warn(f"screen '{self.active_screen.name}' does not parse "
                  f"({tree.message} at {tree.position}); edit ignored")
            return None
        return tree

    def _apply_canvas_add(self, mutation: CanvasAdd) -> Optional[SyncEvent]:
        component_type = self.vocabulary.by_type(mutation.type_tag)
        if component_type is None:
            _warn(f"unknown component type '{mutation.type_tag}'")
            return None
        tree = self._parse_active()
        if tree is None:
            return None
        roots = tree.roots
        if not roots:
            _warn("no markup to insert into")
            return None
        props = drop_payload(component_type, mutation.properties)
        existing = collect_ids(tree) | {n.id for n in self.state.components}
        component_id = props.get("id")
        if not isinstance(component_id, str) or not component_id or component_id in existing:
            component_id = generate_component_id(self.id_prefix, existing)
        props = {"id": component_id, **{k: v for k, v in props.items() if k != "id"}}

        el = create_element(tree, component_type.tag, component_id, props, self.event_prefix)
        insert_child(tree, tree.element(roots[0]), el)
        self._commit(print_tree(tree), Provenance.VISUAL_CANVAS)
        self.state.components.append(ComponentNode(component_id, component_type.type_tag, props))
        self.state.selection.component_id = component_id
        return self._republish(component_id=component_id)

    def _apply_property_edit(self, mutation: PropertyEdit) -> Optional[SyncEvent]:
        node = self.selected_component
        if node is None:
            _warn(f"no component selected; '{mutation.name}' not applied")
            return None
        if mutation.name == "id":
            _warn("id is not editable")
            return None
        tree = self._parse_active()
        if tree is None:
            return None
        el = find_by_id(tree, node.id)
        if el is None:
            _warn(f"component '{node.id}' not found in source; edit ignored")
            return None
        props = {**node.properties, mutation.name: mutation.value}
        merge_properties(tree, el, props, self.event_prefix)
        text = print_tree(tree)
        if text == self.source_text:
            return None
        self._commit(text, Provenance.PROPERTY_EDITOR)
        # 只換掉被編輯的那一筆，清單順序與其他元素不動
        index = self.state.components.index(node)
        self.state.components[index] = dataclasses.replace(node, properties=props)
        return self._republish(component_id=node.id)

    def _apply_text_edit(self, mutation: TextEdit) -> Optional[SyncEvent]:
        if mutation.text == self.source_text:
            return None
        tree = parse(mutation.text)
        if not tree:
            _warn(f"source does not parse ({tree.message} at {tree.position}); "
                  "keeping the last valid version")
            return None
        self._commit(mutation.text, Provenance.TEXT_EDITOR)
        return self._republish(tree=tree)

    def _apply_switch_screen(self, mutation: SwitchScreen) -> Optional[SyncEvent]:
        if mutation.screen_id not in self.state.screens:
            _warn(f"unknown screen '{mutation.screen_id}'")
            return None
        self.state.active_screen_id = mutation.screen_id
        self.state.selection.clear()
        self.state.provenance[mutation.screen_id] = Provenance.INITIAL
        return self._republish()

    def _commit(self, text: str, provenance: Provenance) -> None:
        self.active_screen.source_text = text
        self.state.provenance[self.state.active_screen_id] = provenance

    def _republish(self, tree=None, component_id=None) -> SyncEvent:
        provenance = self.provenance
        event = SyncEvent(
            screen_id=self.state.active_screen_id,
            provenance=provenance,
            source_text=self.source_text,
            component_id=component_id,
        )
        if provenance in (Provenance.TEXT_EDITOR, Provenance.INITIAL):
            tree = tree or parse(self.source_text)
            if tree:
                self.state.components = discover_components(tree, self.vocabulary, self.id_prefix)
            else:
                _warn(f"screen '{self.active_screen.name}' does not parse; canvas left empty")
                self.state.components = []
            event.rediscovered = True
            if self.selected_component is None:
                self.state.selection.clear()
        if provenance in (Provenance.VISUAL_CANVAS, Provenance.PROPERTY_EDITOR, Provenance.INITIAL):
            event.pushed_to_editor = self._push_to_editor(self.source_text)
        for listener in list(self._listeners):
            listener(event)
        return event

    def _push_to_editor(self, text: str) -> bool:
        editor = self.editor
        if editor is None or editor.get_text() == text:
            return False
        if editor.has_focus():
            cursor = editor.get_cursor_position()
            editor.set_text(text)
            editor.set_cursor_position(min(cursor, len(text)))
        else:
            editor.set_text(text)
        return True
