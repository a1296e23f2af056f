"""
Text editor 協作者

同步引擎只透過 get/set text、游標與變更通知使用文字編輯器。
BufferEditor 為記憶體實作（無介面、測試用）；FileEditor 以磁碟檔為內容。
"""

from pathlib import Path


class TextEditor:
    """文字編輯器介面."""

    def get_text(self) -> str:
        raise NotImplementedError

    def set_text(self, text: str) -> None:
        raise NotImplementedError

    def on_change(self, callback) -> None:
        raise NotImplementedError

    def get_cursor_position(self) -> int:
        return 0

    def set_cursor_position(self, position: int) -> None:
        pass

    def has_focus(self) -> bool:
        return False


class BufferEditor(TextEditor):
    """程式設定內容也會觸發 on_change（與常見編輯器元件行為相同）."""

    def __init__(self, text: str = "", focused: bool = False):
        self._text = text
        self._cursor = 0
        self._callbacks = []
        self.focused = focused

    def get_text(self) -> str:
        return self._text

    def set_text(self, text: str) -> None:
        if text == self._text:
            return
        self._text = text
        # 程式覆寫後游標回到開頭，由呼叫端還原
        self._cursor = 0
        self._emit()

    def type_text(self, text: str, cursor: int = None) -> None:
        """模擬使用者輸入：整份內容換成 text，游標停在 cursor."""
        self._text = text
        self._cursor = len(text) if cursor is None else cursor
        self._emit()

    def on_change(self, callback) -> None:
        self._callbacks.append(callback)

    def get_cursor_position(self) -> int:
        return self._cursor

    def set_cursor_position(self, position: int) -> None:
        self._cursor = max(0, min(position, len(self._text)))

    def has_focus(self) -> bool:
        return self.focused

    def _emit(self) -> None:
        for callback in list(self._callbacks):
            callback(self._text)


class FileEditor(TextEditor):
    """以檔案為內容的編輯器；外部修改由 reload() 通知."""

    def __init__(self, path):
        self.path = Path(path)
        self._callbacks = []

    def get_text(self) -> str:
        if not self.path.exists():
            return ""
        return self.path.read_text(encoding="utf-8")

    def set_text(self, text: str) -> None:
        if text == self.get_text():
            return
        self.path.write_text(text, encoding="utf-8")

    def on_change(self, callback) -> None:
        self._callbacks.append(callback)

    def reload(self) -> None:
        text = self.get_text()
        for callback in list(self._callbacks):
            callback(text)
