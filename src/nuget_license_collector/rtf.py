"""Conversion of RTF license documents to HTML.

Only the visible text and its paragraph structure are carried over:
paragraphs become ``<p>`` elements, line breaks ``<br>``, and font tables,
style sheets, document info, pictures and other destinations are dropped.
Character formatting is ignored.
"""

import codecs
import html
import re

# Destinations whose content is never visible text
SKIPPED_DESTINATIONS = frozenset(
    {
        "author", "buptim", "colortbl", "comment", "company", "creatim",
        "datastore", "doccomm", "falt", "fldinst", "filetbl", "fonttbl",
        "footer", "footerf", "footerl", "footerr", "footnote", "generator",
        "header", "headerf", "headerl", "headerr", "info", "keywords",
        "latentstyles", "listoverridetable", "listtable", "object",
        "operator", "pict", "printim", "revtbl", "revtim", "rsidtbl",
        "stylesheet", "subject", "themedata", "title", "xmlnstbl",
    }
)

# Control words that stand for a single character
SPECIAL_CHARACTERS = {
    "tab": "\t",
    "emdash": "\u2014",
    "endash": "\u2013",
    "emspace": "\u2003",
    "enspace": "\u2002",
    "bullet": "\u2022",
    "lquote": "\u2018",
    "rquote": "\u2019",
    "ldblquote": "\u201c",
    "rdblquote": "\u201d",
    "cell": " ",
}

PARAGRAPH_BREAKS = frozenset({"par", "sect", "page", "row"})

_TOKEN_RE = re.compile(
    r"\\([a-zA-Z]+)(-?\d+)? ?"  # control word with optional parameter
    r"|\\'([0-9a-fA-F]{2})"  # hex-escaped byte
    r"|\\(.)"  # control symbol
    r"|([{}])"  # group delimiters
    r"|([\r\n]+)"  # raw line breaks are not content
    r"|([^\\{}\r\n]+)",  # plain text
    re.DOTALL,
)


class _Group:
    __slots__ = ("skip", "uc")

    def __init__(self, skip: bool = False, uc: int = 1) -> None:
        self.skip = skip
        self.uc = uc


class _HtmlBuilder:
    def __init__(self, codepage: str) -> None:
        self.codepage = codepage
        self.paragraphs: list[str] = []
        self._current: list[str] = []
        self._pending_bytes = bytearray()

    def add_byte(self, value: int) -> None:
        self._pending_bytes.append(value)

    def _flush_bytes(self) -> None:
        if self._pending_bytes:
            text = bytes(self._pending_bytes).decode(self.codepage, errors="replace")
            self._current.append(html.escape(text))
            self._pending_bytes.clear()

    def add_text(self, text: str) -> None:
        self._flush_bytes()
        self._current.append(html.escape(text))

    def line_break(self) -> None:
        self._flush_bytes()
        self._current.append("<br>")

    def end_paragraph(self) -> None:
        self._flush_bytes()
        self.paragraphs.append("<p>" + "".join(self._current) + "</p>")
        self._current = []

    def finish(self) -> str:
        self._flush_bytes()
        if any(part.strip() for part in self._current):
            self.end_paragraph()
        return "<html><body>" + "".join(self.paragraphs) + "</body></html>"


def _codepage(number: int) -> str:
    name = f"cp{number}"
    try:
        codecs.lookup(name)
    except LookupError:
        return "cp1252"
    return name


def rtf_to_html(rtf: str) -> str:
    """Convert an RTF document to a simple HTML document.

    Args:
        rtf: RTF source, starting with ``{\\rtf``.

    Returns:
        HTML with one ``<p>`` per RTF paragraph.

    Raises:
        ValueError: If the input is not an RTF document.
    """
    stripped = rtf.lstrip()
    if not (stripped.startswith("{\\rtf") or stripped.startswith("\\rtf")):
        raise ValueError("Input is not an RTF document")

    builder = _HtmlBuilder("cp1252")
    stack: list[_Group] = []
    group = _Group()
    # Fallback characters still to drop after a \uN escape
    skip_chars = 0

    for match in _TOKEN_RE.finditer(stripped):
        word, param, hex_byte, symbol, brace, newline, text = match.groups()

        if brace == "{":
            stack.append(group)
            group = _Group(skip=group.skip, uc=group.uc)
            skip_chars = 0
            continue
        if brace == "}":
            group = stack.pop() if stack else _Group()
            skip_chars = 0
            continue
        if newline is not None:
            continue

        if word is not None:
            # \binN payloads are dropped along with the rest of their group
            if word == "bin" or word in SKIPPED_DESTINATIONS:
                group.skip = True
                continue
            if word == "ansicpg" and param:
                builder.codepage = _codepage(int(param))
                continue
            if word == "uc" and param:
                group.uc = int(param)
                continue
            if group.skip:
                continue
            if word == "u" and param:
                code = int(param)
                if code < 0:
                    code += 65536
                builder.add_text(chr(code))
                skip_chars = group.uc
                continue
            if word in PARAGRAPH_BREAKS:
                builder.end_paragraph()
            elif word == "line":
                builder.line_break()
            elif word in SPECIAL_CHARACTERS:
                builder.add_text(SPECIAL_CHARACTERS[word])
            continue

        if symbol is not None:
            if symbol == "*":
                group.skip = True
                continue
            if group.skip:
                continue
            if skip_chars:
                skip_chars -= 1
                continue
            if symbol in "\\{}":
                builder.add_text(symbol)
            elif symbol == "~":
                builder.add_text("\u00a0")
            elif symbol == "_":
                builder.add_text("-")
            elif symbol in "\r\n":
                builder.end_paragraph()
            continue

        if group.skip:
            continue

        if hex_byte is not None:
            if skip_chars:
                skip_chars -= 1
                continue
            builder.add_byte(int(hex_byte, 16))
            continue

        if text:
            if skip_chars:
                consumed = min(skip_chars, len(text))
                text = text[consumed:]
                skip_chars -= consumed
            if text:
                builder.add_text(text)

    return builder.finish()
