"""
Screen 集合 — 每個 Screen 的 UI 只以原始碼文字保存

新增 / 改名 / 刪除（不可刪除最後一個），以及目錄持久化：
一個 Screen 對應一個 <Name><ext> 檔，內容即原始碼。
"""

import re
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional


class ScreenError(ValueError):
    pass


@dataclass
class Screen:
    id: str
    name: str
    # 只由 SyncCoordinator 寫入
    source_text: str


def _function_name(name: str) -> str:
    if re.match(r"^[A-Za-z_$][\w$]*$", name):
        return name
    words = re.sub(r"[^a-zA-Z0-9]", " ", name).split()
    pascal = "".join(w[:1].upper() + w[1:] for w in words)
    if not pascal or pascal[0].isdigit():
        pascal = "Screen" + pascal
    return pascal


def screen_template(name: str) -> str:
    return f"export default function {_function_name(name)}() {{ return <div>{name} Screen</div>; }}"


class ScreenCollection:
    def __init__(self, screens: Optional[list] = None):
        self._screens: list[Screen] = list(screens or [])
        if not self._screens:
            self._screens.append(Screen("1", "Home", screen_template("Home")))

    def __iter__(self):
        return iter(list(self._screens))

    def __len__(self) -> int:
        return len(self._screens)

    def __contains__(self, screen_id) -> bool:
        return any(s.id == screen_id for s in self._screens)

    @property
    def first(self) -> Screen:
        return self._screens[0]

    def get(self, screen_id: str) -> Screen:
        for screen in self._screens:
            if screen.id == screen_id:
                return screen
        raise KeyError(screen_id)

    def _new_id(self) -> str:
        candidate = int(time.time() * 1000)
        while str(candidate) in self:
            candidate += 1
        return str(candidate)

    def _check_name(self, name: str, screen_id: Optional[str] = None) -> str:
        """名稱即檔名：不可為空、不可含路徑、不可與其他 Screen 重複."""
        name = name.strip()
        if not name:
            raise ScreenError("screen name must not be empty")
        if "/" in name or "\\" in name or ".." in name:
            raise ScreenError(f"screen name '{name}' must not contain path separators or '..'")
        for screen in self._screens:
            if screen.name == name and screen.id != screen_id:
                raise ScreenError(f"screen '{name}' already exists")
        return name

    def add(self, name: str, source_text: Optional[str] = None) -> Screen:
        name = self._check_name(name)
        screen = Screen(self._new_id(), name, screen_template(name) if source_text is None else source_text)
        self._screens.append(screen)
        return screen

    def rename(self, screen_id: str, name: str) -> Screen:
        screen = self.get(screen_id)
        name = self._check_name(name, screen_id)
        screen.name = name
        return screen

    def delete(self, screen_id: str) -> Screen:
        screen = self.get(screen_id)
        if len(self._screens) == 1:
            raise ScreenError("cannot delete the only screen")
        self._screens.remove(screen)
        return screen

    # ─── 目錄持久化 ───────────────────────────────────────────────────────

    @staticmethod
    def file_path(directory, screen: Screen, extension: str = ".jsx") -> Path:
        return Path(directory) / f"{screen.name}{extension}"

    def save_dir(self, directory, extension: str = ".jsx") -> list:
        root = Path(directory)
        root.mkdir(parents=True, exist_ok=True)
        written = []
        for screen in self._screens:
            path = self.file_path(root, screen, extension)
            path.write_text(screen.source_text, encoding="utf-8")
            written.append(str(path))
        return written

    @classmethod
    def load_dir(cls, directory, extension: str = ".jsx") -> "ScreenCollection":
        root = Path(directory)
        screens = []
        if root.is_dir():
            for i, path in enumerate(sorted(root.glob(f"*{extension}"))):
                screens.append(Screen(str(i + 1), path.stem, path.read_text(encoding="utf-8")))
        return cls(screens)
