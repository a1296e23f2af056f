"""
JSX Codec — 原始碼 ⇄ 元素樹

只解析 JSX 標記本身；import、function 宣告等外圍 JS 以原文片段保留。
每個元素的開始標籤、屬性、子節點、結束標籤都保存原始文字，
所以 print_tree(parse(s)) == s，只有被改過的元素才會改變格式。

元素以整數 handle 存放在 SyntaxTree 的 arena 中，handle 依文件順序遞增。
"""

import json
import re
from dataclasses import dataclass, field
from typing import Iterator, Optional, Union

# 片段：原文字串或元素 handle
Part = Union[str, int]

_TAG_NAME_RE = re.compile(r"[A-Za-z_$][\w$.:\-]*")
_ATTR_NAME_RE = re.compile(r"[A-Za-z_$][\w$:\-]*")
_CLOSING_TAG_RE = re.compile(r"</\s*([A-Za-z_$][\w$.:\-]*)?\s*>")
_IDENT_RE = re.compile(r"[A-Za-z_$][\w$]*")
_NUMBER_RE = re.compile(r"\d[\w.]*|\.\d[\w]*")
_WHITESPACE = " \t\r\n"

_PUNCTUATORS = sorted([
    ">>>=", "...", "===", "!==", "**=", "<<=", ">>=", ">>>", "&&=", "||=", "??=",
    "=>", "==", "!=", "<=", ">=", "&&", "||", "??", "?.", "++", "--",
    "+=", "-=", "*=", "/=", "%=", "&=", "|=", "^=", "**", "<<", ">>",
    "=", "<", ">", "+", "-", "*", "/", "%", "&", "|", "^", "!", "~",
    "?", ":", ";", ",", ".", "@", "#",
], key=len, reverse=True)

# 這些 token 之後出現的 `<` / `/` 屬於運算式開頭（JSX / regex）
_EXPRESSION_KEYWORDS = {
    "return", "yield", "await", "default", "case", "else", "do", "in", "of",
    "typeof", "void", "delete", "throw", "instanceof",
}
_VALUE_END_PUNCTUATORS = {")", "]", "}", "++", "--"}
_BRACKETS = {")": "(", "]": "[", "}": "{"}


class JSXSyntaxError(ValueError):
    """原始碼無法解析；position 為字元位移."""

    def __init__(self, message: str, position: int):
        super().__init__(f"{message} (offset {position})")
        self.message = message
        self.position = position


@dataclass
class ParseFailure:
    """parse() 失敗時回傳的 sentinel，布林值為 False."""
    message: str
    position: int = -1

    def __bool__(self) -> bool:
        return False


@dataclass
class TextNode:
    raw: str


@dataclass
class ExpressionNode:
    """子節點中的 {…} 運算式容器."""
    parts: list = field(default_factory=list)


@dataclass
class Attribute:
    name: str
    kind: str  # "bare" | "string" | "expression" | "spread"
    leading: str = " "
    eq: str = "="
    quote: str = '"'
    text: str = ""
    parts: list = field(default_factory=list)
    source: str = ""


@dataclass
class Element:
    handle: int
    tag: str
    head: str
    attributes: list = field(default_factory=list)
    tail: str = ">"
    children: list = field(default_factory=list)
    closing: str = ""
    parent: Optional[int] = None
    start: int = -1

    @property
    def self_closing(self) -> bool:
        return not self.closing and self.tail.endswith("/>")


class SyntaxTree:
    """由單一份原始碼衍生的元素樹；原始碼改變後即失效，請重新 parse."""

    def __init__(self, source: str, segments: list, elements: dict):
        self.source = source
        self.segments = segments
        self.elements = elements
        self._next_handle = max(elements, default=-1) + 1

    @property
    def roots(self) -> list:
        return [p for p in self.segments if isinstance(p, int)]

    def element(self, handle: int) -> Element:
        return self.elements[handle]

    def new_element(self, tag: str, self_closing: bool = False) -> Element:
        handle = self._allocate()
        el = Element(
            handle=handle,
            tag=tag,
            head=f"<{tag}",
            tail=" />" if self_closing else ">",
            closing="" if self_closing else f"</{tag}>",
        )
        self.elements[handle] = el
        return el

    def parse_expression(self, source: str) -> list:
        """把一段 JS 運算式掃描成片段；其中的 JSX 元素會登記進本樹."""
        if not source.strip():
            raise JSXSyntaxError("empty expression", 0)
        scanner = _Scanner(source, first_handle=self._next_handle)
        parts = scanner.scan_code(None)
        self.elements.update(scanner.elements)
        self._next_handle = max(self.elements, default=-1) + 1
        return parts

    def discard(self, handle: int) -> None:
        """從 arena 移除元素與其所有子孫."""
        for h in list(_walk_element(self, handle)):
            self.elements.pop(h, None)

    def _allocate(self) -> int:
        handle = self._next_handle
        self._next_handle += 1
        return handle

    # ─── printing ───────────────────────────────────────────────────────

    def render_parts(self, parts: list) -> str:
        return "".join(p if isinstance(p, str) else self.render(p) for p in parts)

    def render(self, handle: int) -> str:
        el = self.elements[handle]
        out = [el.head]
        for attr in el.attributes:
            out.append(attr.leading)
            out.append(self.render_attribute(attr))
        out.append(el.tail)
        for child in el.children:
            if isinstance(child, int):
                out.append(self.render(child))
            elif isinstance(child, ExpressionNode):
                out.append("{" + self.render_parts(child.parts) + "}")
            else:
                out.append(child.raw)
        out.append(el.closing)
        return "".join(out)

    def render_attribute(self, attr: Attribute) -> str:
        if attr.kind == "bare":
            return attr.name
        if attr.kind == "string":
            return f"{attr.name}{attr.eq}{attr.quote}{attr.text}{attr.quote}"
        if attr.kind == "spread":
            return "{" + self.render_parts(attr.parts) + "}"
        return f"{attr.name}{attr.eq}{{{self.render_parts(attr.parts)}}}"


class _Scanner:
    def __init__(self, text: str, first_handle: int = 0):
        self.text = text
        self.pos = 0
        self.elements: dict[int, Element] = {}
        self._next_handle = first_handle
        self._open: list[int] = []

    def _error(self, message: str, position: Optional[int] = None):
        return JSXSyntaxError(message, self.pos if position is None else position)

    # ─── JS 區段 ────────────────────────────────────────────────────────

    def scan_code(self, closer: Optional[str]) -> list:
        """掃描 JS 直到檔尾（closer=None）或未配對的 `}`（不消耗）."""
        text = self.text
        parts: list = []
        buf_start = self.pos
        stack: list[str] = []
        prev: Optional[str] = None

        def flush(end):
            if end > buf_start:
                parts.append(text[buf_start:end])

        while True:
            if self.pos >= len(text):
                if stack:
                    raise self._error(f"unclosed '{stack[-1]}'")
                if closer:
                    raise self._error("unexpected end of input, expected '}'")
                flush(self.pos)
                return parts
            ch = text[self.pos]
            if ch in _WHITESPACE:
                self.pos += 1
            elif text.startswith("//", self.pos):
                nl = text.find("\n", self.pos)
                self.pos = len(text) if nl < 0 else nl
            elif text.startswith("/*", self.pos):
                end = text.find("*/", self.pos + 2)
                if end < 0:
                    raise self._error("unterminated comment")
                self.pos = end + 2
            elif ch in "'\"":
                self._skip_string(ch)
                prev = "<value>"
            elif ch == "`":
                flush(self.pos)
                parts.extend(self._scan_template())
                buf_start = self.pos
                prev = "<value>"
            elif ch in "([{":
                stack.append(ch)
                self.pos += 1
                prev = ch
            elif ch in ")]}":
                if not stack:
                    if ch == "}" and closer == "}":
                        flush(self.pos)
                        return parts
                    raise self._error(f"unexpected '{ch}'")
                if stack.pop() != _BRACKETS[ch]:
                    raise self._error(f"mismatched '{ch}'")
                self.pos += 1
                prev = ch
            elif ch == "<" and self._expression_start(prev) and self._starts_markup():
                flush(self.pos)
                parts.append(self.parse_element())
                buf_start = self.pos
                prev = "<value>"
            elif ch == "/" and self._expression_start(prev):
                self._skip_regex()
                prev = "<value>"
            else:
                m = _IDENT_RE.match(text, self.pos) or _NUMBER_RE.match(text, self.pos)
                if m:
                    word = m.group(0)
                    self.pos = m.end()
                    prev = word if word in _EXPRESSION_KEYWORDS else "<value>"
                    continue
                for punct in _PUNCTUATORS:
                    if text.startswith(punct, self.pos):
                        self.pos += len(punct)
                        prev = punct
                        break
                else:
                    # 非 ASCII 識別字等
                    self.pos += 1
                    prev = "<value>"

    @staticmethod
    def _expression_start(prev: Optional[str]) -> bool:
        if prev is None or prev in _EXPRESSION_KEYWORDS:
            return True
        if prev == "<value>" or prev in _VALUE_END_PUNCTUATORS:
            return False
        return True

    def _starts_markup(self) -> bool:
        nxt = self.text[self.pos + 1:self.pos + 2]
        return nxt == ">" or bool(_TAG_NAME_RE.match(nxt))

    def _skip_string(self, quote: str) -> None:
        start = self.pos
        self.pos += 1
        text = self.text
        while self.pos < len(text):
            ch = text[self.pos]
            if ch == "\\":
                self.pos += 2
            elif ch == quote:
                self.pos += 1
                return
            elif ch == "\n":
                break
            else:
                self.pos += 1
        raise self._error("unterminated string literal", start)

    def _scan_template(self) -> list:
        start = self.pos
        text = self.text
        parts: list = []
        seg_start = start
        self.pos += 1
        while self.pos < len(text):
            ch = text[self.pos]
            if ch == "\\":
                self.pos += 2
            elif ch == "`":
                self.pos += 1
                parts.append(text[seg_start:self.pos])
                return parts
            elif text.startswith("${", self.pos):
                self.pos += 2
                parts.append(text[seg_start:self.pos])
                parts.extend(self.scan_code("}"))
                seg_start = self.pos
                self.pos += 1
            else:
                self.pos += 1
        raise self._error("unterminated template literal", start)

    def _skip_regex(self) -> None:
        start = self.pos
        text = self.text
        in_class = False
        self.pos += 1
        while self.pos < len(text):
            ch = text[self.pos]
            if ch == "\\":
                self.pos += 2
                continue
            if ch == "\n":
                break
            self.pos += 1
            if ch == "[":
                in_class = True
            elif ch == "]":
                in_class = False
            elif ch == "/" and not in_class:
                m = _IDENT_RE.match(text, self.pos)
                if m:
                    self.pos = m.end()
                return
        raise self._error("unterminated regular expression", start)

    def _scan_braced(self) -> list:
        """self.pos 位於 `{`；回傳大括號內的片段並消耗 `}`."""
        self.pos += 1
        parts = self.scan_code("}")
        self.pos += 1
        return parts

    # ─── JSX ────────────────────────────────────────────────────────────

    def parse_element(self) -> int:
        text = self.text
        start = self.pos
        handle = self._next_handle
        self._next_handle += 1
        parent = self._open[-1] if self._open else None

        if text.startswith("<>", start):
            el = Element(handle=handle, tag="", head="<", tail=">", parent=parent, start=start)
            self.elements[handle] = el
            self.pos = start + 2
        else:
            m = _TAG_NAME_RE.match(text, start + 1)
            el = Element(handle=handle, tag=m.group(0), head=text[start:m.end()],
                         parent=parent, start=start)
            self.elements[handle] = el
            self.pos = m.end()
            self._parse_attributes(el)

        if not el.self_closing:
            self._open.append(handle)
            try:
                self._parse_children(el)
            finally:
                self._open.pop()
        return handle

    def _parse_attributes(self, el: Element) -> None:
        text = self.text
        while True:
            ws_start = self.pos
            while self.pos < len(text) and text[self.pos] in _WHITESPACE:
                self.pos += 1
            if self.pos >= len(text):
                raise self._error(f"unterminated opening tag <{el.tag}>", el.start)
            ch = text[self.pos]
            if ch == ">":
                self.pos += 1
                el.tail = text[ws_start:self.pos]
                return
            if ch == "/":
                if not text.startswith("/>", self.pos):
                    raise self._error(f"expected '/>' in <{el.tag}>")
                self.pos += 2
                el.tail = text[ws_start:self.pos]
                return
            if self.pos == ws_start:
                raise self._error(f"expected whitespace before attribute in <{el.tag}>")
            el.attributes.append(self._parse_attribute(text[ws_start:self.pos]))

    def _parse_attribute(self, leading: str) -> Attribute:
        text = self.text
        attr_start = self.pos
        if text[self.pos] == "{":
            parts = self._scan_braced()
            return Attribute(name="", kind="spread", leading=leading, parts=parts,
                             source=text[attr_start:self.pos])
        m = _ATTR_NAME_RE.match(text, self.pos)
        if not m:
            raise self._error(f"invalid attribute name {text[self.pos]!r}")
        name = m.group(0)
        self.pos = m.end()
        probe = self.pos
        while probe < len(text) and text[probe] in _WHITESPACE:
            probe += 1
        if probe >= len(text) or text[probe] != "=":
            return Attribute(name=name, kind="bare", leading=leading, source=name)
        probe += 1
        while probe < len(text) and text[probe] in _WHITESPACE:
            probe += 1
        eq = text[m.end():probe]
        self.pos = probe
        ch = text[self.pos:self.pos + 1]
        if ch in ("'", '"'):
            end = text.find(ch, self.pos + 1)
            if end < 0:
                raise self._error(f"unterminated value for attribute '{name}'")
            attr = Attribute(name=name, kind="string", leading=leading, eq=eq, quote=ch,
                             text=text[self.pos + 1:end])
            self.pos = end + 1
        elif ch == "{":
            attr = Attribute(name=name, kind="expression", leading=leading, eq=eq,
                             parts=self._scan_braced())
        else:
            raise self._error(f"unsupported value for attribute '{name}'")
        attr.source = text[attr_start:self.pos]
        return attr

    def _parse_children(self, el: Element) -> None:
        text = self.text
        while True:
            if self.pos >= len(text):
                raise self._error(f"unclosed element <{el.tag}>", el.start)
            if text.startswith("</", self.pos):
                m = _CLOSING_TAG_RE.match(text, self.pos)
                if not m or (m.group(1) or "") != el.tag:
                    raise self._error(f"expected closing tag for <{el.tag}>")
                el.closing = m.group(0)
                self.pos = m.end()
                return
            ch = text[self.pos]
            if ch == "<":
                if not self._starts_markup():
                    raise self._error("unexpected '<' in JSX text")
                el.children.append(self.parse_element())
            elif ch == "{":
                el.children.append(ExpressionNode(self._scan_braced()))
            elif ch == "}":
                raise self._error("unexpected '}' in JSX text")
            else:
                start = self.pos
                while self.pos < len(text) and text[self.pos] not in "<{}":
                    self.pos += 1
                el.children.append(TextNode(text[start:self.pos]))


# ─── public API ─────────────────────────────────────────────────────────


def parse(source_text: str) -> Union[SyntaxTree, ParseFailure]:
    """解析含 JSX 的模組原始碼；失敗時回傳 ParseFailure，從不拋例外."""
    scanner = _Scanner(source_text)
    try:
        segments = scanner.scan_code(None)
    except JSXSyntaxError as e:
        return ParseFailure(e.message, e.position)
    except (IndexError, AttributeError) as e:
        # 掃描器在格式錯亂的輸入上越界
        return ParseFailure(f"malformed input: {e}", scanner.pos)
    return SyntaxTree(source_text, segments, scanner.elements)


def print_tree(tree: SyntaxTree) -> str:
    return tree.render_parts(tree.segments)


def walk(tree: SyntaxTree) -> Iterator[int]:
    """依文件順序（深度優先、前序）走訪所有可達元素."""
    yield from _walk_parts(tree, tree.segments)


def _walk_parts(tree: SyntaxTree, parts: list) -> Iterator[int]:
    for part in parts:
        if isinstance(part, int):
            yield from _walk_element(tree, part)


def _walk_element(tree: SyntaxTree, handle: int) -> Iterator[int]:
    el = tree.elements.get(handle)
    if el is None:
        return
    yield handle
    for attr in el.attributes:
        yield from _walk_parts(tree, attr.parts)
    for child in el.children:
        if isinstance(child, int):
            yield from _walk_element(tree, child)
        elif isinstance(child, ExpressionNode):
            yield from _walk_parts(tree, child.parts)


_JSON_STRING_RE = re.compile(r'^"(?:[^"\\\n]|\\.)*"$')


def element_text(tree: SyntaxTree, el: Element) -> str:
    """串接文字子節點（含字串常值容器），去除前後空白."""
    pieces = []
    for child in el.children:
        if isinstance(child, TextNode):
            pieces.append(child.raw)
        elif isinstance(child, ExpressionNode):
            source = tree.render_parts(child.parts).strip()
            if _JSON_STRING_RE.match(source):
                try:
                    pieces.append(json.loads(source))
                except ValueError:
                    continue
    return "".join(pieces).strip()


def set_element_text(tree: SyntaxTree, el: Element, value: str) -> None:
    """以單一文字節點整批取代元素內容."""
    for child in el.children:
        if isinstance(child, int):
            tree.discard(child)
    if not value:
        el.children = []
        return
    if any(c in value for c in "{}<>"):
        el.children = [ExpressionNode([json.dumps(value, ensure_ascii=False)])]
    else:
        el.children = [TextNode(value)]
    if el.self_closing:
        el.tail = el.tail[:-2].rstrip() + ">"
        el.closing = f"</{el.tag}>"
