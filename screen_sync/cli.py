#!/usr/bin/env python3
"""
screen-sync CLI — 以原始碼為唯一來源的 Screen 設計工具

  screen-sync screens                              # 列出 Screen
  screen-sync preview Home                         # 預覽畫布元件清單
  screen-sync add Home --type Button --prop children=Click
  screen-sync set Home comp-abc123xyz disabled=true
  screen-sync new-screen Settings | rename-screen Settings Prefs | delete-screen Prefs
  screen-sync watch Home                           # 監看檔案，外部修改即重新同步
"""

import argparse
import asyncio
import json
import threading
import time
from pathlib import Path
from typing import Optional

from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

from screen_sync import __version__

from .config import DEFAULT_CONFIG_PATH, load_config
from .coordinator import DesignerState, SyncCoordinator
from .editor import FileEditor
from .property_grid import preview_component_list
from .screens import ScreenCollection, ScreenError


def _screens_dir(config: dict) -> Path:
    return Path(config.get("source", {}).get("screensDir", "screens") or "screens")


def _extension(config: dict) -> str:
    return config.get("source", {}).get("extension", ".jsx") or ".jsx"


def _load_screens(config: dict) -> ScreenCollection:
    return ScreenCollection.load_dir(_screens_dir(config), _extension(config))


def _find_screen(screens: ScreenCollection, name: str):
    for screen in screens:
        if screen.name == name:
            return screen
    return None


def _parse_value(raw: str):
    """CLI 值：能解析成 JSON 的就用 JSON（true / 3 / {...}），否則當字串."""
    try:
        return json.loads(raw)
    except ValueError:
        return raw


def _parse_assignment(text: str):
    if "=" not in text:
        raise ValueError(f"expected name=value, got '{text}'")
    name, raw = text.split("=", 1)
    return name.strip(), _parse_value(raw)


def open_screen(name: str, config: dict):
    """載入 Screen 並建立以該檔案為編輯器的 coordinator；找不到回傳 (None, None)."""
    screens = _load_screens(config)
    screen = _find_screen(screens, name)
    if screen is None:
        print(f"❌ 找不到 Screen '{name}'（目錄：{_screens_dir(config)}）")
        return None, None
    path = ScreenCollection.file_path(_screens_dir(config), screen, _extension(config))
    editor = FileEditor(path)
    state = DesignerState(screens=screens, active_screen_id=screen.id)
    coordinator = SyncCoordinator.from_config(config, state=state, editor=editor)
    return coordinator, editor


def cmd_screens(args, config: dict):
    screens_dir = _screens_dir(config)
    screens = _load_screens(config)
    print(f"📂 Screens in '{screens_dir}':")
    for screen in screens:
        path = ScreenCollection.file_path(screens_dir, screen, _extension(config))
        flag = "" if path.exists() else "  (not saved)"
        print(f"   ├─ {screen.name}{flag}")


def cmd_preview(args, config: dict):
    """預覽畫布元件清單."""
    coordinator, _ = open_screen(args.screen, config)
    if coordinator is None:
        return
    print(f"👁️  Preview components: {args.screen}")
    if not coordinator.components:
        print("   (no components)")
        return
    print(preview_component_list(coordinator.components))
    print(f"\nTotal components: {len(coordinator.components)}")


def cmd_add(args, config: dict):
    """visual-canvas：新增元件到 Screen."""
    coordinator, editor = open_screen(args.screen, config)
    if coordinator is None:
        return
    if coordinator.vocabulary.by_type(args.type) is None:
        known = ", ".join(t.type_tag for t in coordinator.vocabulary.types)
        print(f"❌ 未知元件型別 '{args.type}'（可用：{known}）")
        return
    try:
        props = dict(_parse_assignment(p) for p in args.prop or [])
    except ValueError as e:
        print(f"❌ {e}")
        return
    node = coordinator.add_component(args.type, props)
    if node is None:
        print("❌ 元件未新增。")
        return
    print(f"   ✅ Added {node.type_tag} '{node.id}'")
    print(f"   ✅ Written to {editor.path}")


def cmd_set(args, config: dict):
    """property-editor：修改元件屬性."""
    coordinator, editor = open_screen(args.screen, config)
    if coordinator is None:
        return
    if coordinator.select(args.component_id) is None:
        print(f"❌ 找不到元件 '{args.component_id}'。")
        return
    try:
        assignments = [_parse_assignment(a) for a in args.assignments]
    except ValueError as e:
        print(f"❌ {e}")
        return
    applied = 0
    for name, value in assignments:
        if coordinator.edit_property(name, value):
            applied += 1
            print(f"   {args.component_id}: {name} = {value!r}")
    if applied:
        print(f"   ✅ Written to {editor.path}")
    else:
        print("   ℹ️  沒有可套用的變更。")


def cmd_new_screen(args, config: dict):
    screens = _load_screens(config)
    try:
        screen = screens.add(args.name)
    except ScreenError as e:
        print(f"❌ {e}")
        return
    screens.save_dir(_screens_dir(config), _extension(config))
    print(f"   ✅ Added screen '{screen.name}'")


def cmd_rename_screen(args, config: dict):
    screens = _load_screens(config)
    screen = _find_screen(screens, args.name)
    if screen is None:
        print(f"❌ 找不到 Screen '{args.name}'")
        return
    old_path = ScreenCollection.file_path(_screens_dir(config), screen, _extension(config))
    try:
        screens.rename(screen.id, args.new_name)
    except ScreenError as e:
        print(f"❌ {e}")
        return
    screens.save_dir(_screens_dir(config), _extension(config))
    new_path = ScreenCollection.file_path(_screens_dir(config), screen, _extension(config))
    if old_path.exists() and old_path != new_path:
        old_path.unlink()
    print(f"   ✅ Renamed '{args.name}' → '{screen.name}'")


def cmd_delete_screen(args, config: dict):
    screens = _load_screens(config)
    screen = _find_screen(screens, args.name)
    if screen is None:
        print(f"❌ 找不到 Screen '{args.name}'")
        return
    try:
        screens.delete(screen.id)
    except ScreenError as e:
        print(f"❌ {e}")
        return
    path = ScreenCollection.file_path(_screens_dir(config), screen, _extension(config))
    if path.exists():
        path.unlink()
    print(f"   🗑️  Deleted screen '{screen.name}'")


_WATCHED_EXTENSIONS = (".jsx", ".tsx", ".js")


class ChangeHandler(FileSystemEventHandler):
    """檔案變更事件處理器，帶 debounce 防抖。"""

    def __init__(self, callback, loop: asyncio.AbstractEventLoop, debounce: float = 1.0,
                 target: Optional[str] = None):
        self.callback = callback
        self.loop = loop
        self.last_trigger = 0.0
        self.debounce_seconds = debounce
        self.target = Path(target).resolve() if target else None

    def on_modified(self, event):
        if event.is_directory:
            return
        if not event.src_path.endswith(_WATCHED_EXTENSIONS):
            return
        if self.target is not None and Path(event.src_path).resolve() != self.target:
            return
        current_time = time.time()
        if current_time - self.last_trigger < self.debounce_seconds:
            return
        self.last_trigger = current_time
        print(f"\n🔄 File changed: {event.src_path}")
        # 所有同步都在同一個 loop 執行緒上依序執行
        asyncio.run_coroutine_threadsafe(self.callback(), self.loop)


def cmd_watch(args, config: dict):
    """Watch: 監看 Screen 檔案，外部修改以 text-editor 來源同步."""
    coordinator, editor = open_screen(args.screen, config)
    if coordinator is None:
        return
    debounce = config.get("watch", {}).get("debounce", 1.0)
    print(f"👀 Watching '{editor.path}'...")
    print("   Press Ctrl+C to stop.")
    print(preview_component_list(coordinator.components))

    loop = asyncio.new_event_loop()

    async def sync_from_disk():
        before = coordinator.source_text
        editor.reload()
        if coordinator.source_text == before:
            print("   ℹ️  No accepted change (unchanged or not parseable).")
            return
        print(f"   ✅ {len(coordinator.components)} components")
        print(preview_component_list(coordinator.components, coordinator.state.selection.component_id))

    def run_loop():
        asyncio.set_event_loop(loop)
        loop.run_forever()

    loop_thread = threading.Thread(target=run_loop, daemon=True)
    loop_thread.start()

    event_handler = ChangeHandler(sync_from_disk, loop, debounce=debounce, target=str(editor.path))
    observer = Observer()
    observer.schedule(event_handler, path=str(editor.path.parent), recursive=False)
    observer.start()

    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        print("\n👋 Stopping watch...")
        observer.stop()
    finally:
        observer.join()
        loop.call_soon_threadsafe(loop.stop)


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="screen-sync: canvas ↔ source bidirectional sync",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("--config", "-c", default=DEFAULT_CONFIG_PATH, help="Config path")
    parser.add_argument("--version", "-v", action="version", version=f"%(prog)s {__version__}")
    sub = parser.add_subparsers(dest="command")

    sub.add_parser("screens", help="List screens")

    preview_p = sub.add_parser("preview", help="Preview canvas components")
    preview_p.add_argument("screen", help="Screen name")

    add_p = sub.add_parser("add", help="Add a component (canvas drop)",
        epilog="Examples:\n  screen-sync add Home\n  screen-sync add Home --type Button --prop children=Save --prop disabled=true",
        formatter_class=argparse.RawDescriptionHelpFormatter)
    add_p.add_argument("screen", help="Screen name")
    add_p.add_argument("--type", default="Button", help="Component type (default: Button)")
    add_p.add_argument("--prop", action="append", help="name=value (value parsed as JSON when possible)")

    set_p = sub.add_parser("set", help="Edit component properties",
        epilog="Examples:\n  screen-sync set Home comp-abc123xyz disabled=true\n  screen-sync set Home comp-abc123xyz children=Submit",
        formatter_class=argparse.RawDescriptionHelpFormatter)
    set_p.add_argument("screen", help="Screen name")
    set_p.add_argument("component_id", help="Component id")
    set_p.add_argument("assignments", nargs="+", help="name=value")

    new_p = sub.add_parser("new-screen", help="Add a screen")
    new_p.add_argument("name")

    rename_p = sub.add_parser("rename-screen", help="Rename a screen")
    rename_p.add_argument("name")
    rename_p.add_argument("new_name")

    delete_p = sub.add_parser("delete-screen", help="Delete a screen (not the last one)")
    delete_p.add_argument("name")

    watch_p = sub.add_parser("watch", help="Watch a screen file and resync on change")
    watch_p.add_argument("screen", help="Screen name")

    args = parser.parse_args(argv)
    config = load_config(args.config)

    commands = {
        "screens": cmd_screens,
        "preview": cmd_preview,
        "add": cmd_add,
        "set": cmd_set,
        "new-screen": cmd_new_screen,
        "rename-screen": cmd_rename_screen,
        "delete-screen": cmd_delete_screen,
        "watch": cmd_watch,
    }
    command = commands.get(args.command)
    if command is None:
        parser.print_help()
        return
    command(args, config)


if __name__ == "__main__":
    main()
