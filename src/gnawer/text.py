"""HTML to plain text conversion.

Tables are drawn as a text grid, links keep only their anchor text and
block elements become line breaks. Conversion never raises: if the markup
cannot be handled completely, whatever text was produced so far is returned.
"""

import logging

from bs4 import BeautifulSoup, NavigableString, Tag
from bs4.builder import ParserRejectedMarkup
from bs4.element import PreformattedString

logger = logging.getLogger(__name__)

SKIP_TAGS = {"script", "style", "noscript", "template", "img", "svg", "iframe"}
PARAGRAPH_TAGS = {"p", "h1", "h2", "h3", "h4", "h5", "h6", "blockquote", "ul", "ol", "dl"}
BLOCK_TAGS = {
    "address", "article", "aside", "dd", "details", "div", "dt", "figcaption",
    "figure", "footer", "form", "header", "hr", "main", "nav", "section",
    "summary", "tr", "caption",
}


class _TextBuilder:
    def __init__(self) -> None:
        self.lines: list[str] = []
        self._current: list[str] = []

    def write(self, text: str) -> None:
        self._current.append(text)

    def newline(self) -> None:
        line = " ".join("".join(self._current).split())
        self._current = []
        if line:
            self.lines.append(line)

    def blank(self) -> None:
        self.newline()
        if self.lines and self.lines[-1] != "":
            self.lines.append("")

    def block(self, lines: list[str]) -> None:
        """Append lines verbatim, separated from surrounding text by blank lines."""
        lines = [line.rstrip() for line in lines]
        while lines and not lines[0].strip():
            lines.pop(0)
        while lines and not lines[-1].strip():
            lines.pop()
        if not lines:
            return
        self.blank()
        self.lines.extend(lines)
        self.lines.append("")

    def text(self) -> str:
        self.newline()
        return "\n".join(self.lines).strip("\n")


class _Renderer:
    def __init__(self) -> None:
        self.out = _TextBuilder()

    def walk(self, node: Tag) -> None:
        out = self.out
        for child in node.children:
            if isinstance(child, PreformattedString):
                # Comments, CDATA, doctypes
                continue
            if isinstance(child, NavigableString):
                out.write(str(child))
                continue
            if not isinstance(child, Tag):
                continue

            name = child.name
            if name in SKIP_TAGS:
                continue
            if name == "br":
                out.newline()
            elif name == "table":
                out.block(render_table(child))
            elif name == "pre":
                out.block(child.get_text().splitlines())
            elif name == "li":
                out.newline()
                out.write("* ")
                self.walk(child)
                out.newline()
            elif name in PARAGRAPH_TAGS:
                out.blank()
                self.walk(child)
                out.blank()
            elif name in BLOCK_TAGS:
                out.newline()
                self.walk(child)
                out.newline()
            else:
                self.walk(child)


def _cell_text(cell: Tag) -> str:
    renderer = _Renderer()
    renderer.walk(cell)
    return " ".join(renderer.out.text().split())


def render_table(table: Tag) -> list[str]:
    """Render a <table> as aligned text rows.

    Rows made only of <th> cells are treated as headers and underlined.
    Nested tables are flattened into their enclosing cell.
    """
    rows: list[tuple[list[str], bool]] = []
    for tr in table.find_all("tr"):
        if tr.find_parent("table") is not table:
            continue
        cells = tr.find_all(["td", "th"], recursive=False)
        if not cells:
            continue
        texts = [_cell_text(cell) for cell in cells]
        is_header = all(cell.name == "th" for cell in cells)
        rows.append((texts, is_header))

    if not rows:
        return []

    columns = max(len(texts) for texts, _ in rows)
    widths = [0] * columns
    for texts, _ in rows:
        for i, text in enumerate(texts):
            widths[i] = max(widths[i], len(text))

    border = "+" + "+".join("-" * (w + 2) for w in widths) + "+"
    lines = [border]
    for texts, is_header in rows:
        padded = texts + [""] * (columns - len(texts))
        lines.append(
            "| " + " | ".join(text.ljust(widths[i]) for i, text in enumerate(padded)) + " |"
        )
        if is_header:
            lines.append(border)
    if lines[-1] != border:
        lines.append(border)
    return lines


def html_to_text(fragment: str) -> str:
    """Convert an HTML fragment into readable plain text."""
    if not fragment or not fragment.strip():
        return ""

    renderer = _Renderer()
    try:
        soup = BeautifulSoup(fragment, "lxml")
        renderer.walk(soup)
    except (ParserRejectedMarkup, RecursionError):
        logger.debug("HTML conversion stopped early, keeping partial text")
    return renderer.out.text()
