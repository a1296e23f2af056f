"""
文字編輯器協作者測試：BufferEditor 通知與游標、FileEditor 讀寫。
"""
from screen_sync.editor import BufferEditor, FileEditor


class TestBufferEditor:
    def setup_method(self):
        self.editor = BufferEditor("abc")
        self.seen = []
        self.editor.on_change(self.seen.append)

    def test_set_text_notifies(self):
        self.editor.set_text("xyz")
        assert self.seen == ["xyz"]
        assert self.editor.get_cursor_position() == 0

    def test_set_same_text_is_silent(self):
        self.editor.set_text("abc")
        assert self.seen == []

    def test_type_text_places_cursor(self):
        self.editor.type_text("hello", cursor=2)
        assert self.seen == ["hello"]
        assert self.editor.get_cursor_position() == 2
        self.editor.type_text("hi")
        assert self.editor.get_cursor_position() == 2

    def test_cursor_is_clamped(self):
        self.editor.set_cursor_position(99)
        assert self.editor.get_cursor_position() == 3
        self.editor.set_cursor_position(-4)
        assert self.editor.get_cursor_position() == 0


class TestFileEditor:
    def test_missing_file_reads_empty(self, tmp_path):
        assert FileEditor(tmp_path / "A.jsx").get_text() == ""

    def test_write_and_reload(self, tmp_path):
        path = tmp_path / "A.jsx"
        editor = FileEditor(path)
        seen = []
        editor.on_change(seen.append)
        editor.set_text("<div/>")
        assert path.read_text(encoding="utf-8") == "<div/>"
        # 程式寫入不通知；外部修改由 reload 通知
        assert seen == []
        path.write_text("<span/>", encoding="utf-8")
        editor.reload()
        assert seen == ["<span/>"]

    def test_unchanged_text_not_rewritten(self, tmp_path):
        path = tmp_path / "A.jsx"
        path.write_text("<div/>", encoding="utf-8")
        mtime = path.stat().st_mtime_ns
        FileEditor(path).set_text("<div/>")
        assert path.stat().st_mtime_ns == mtime
