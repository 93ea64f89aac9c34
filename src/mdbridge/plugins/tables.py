"""Table options layered over markdown-it's GFM table rule.

markdown-it always pads and truncates body rows to the header width and
only accepts tables whose separator row matches the header. This plugin
rebuilds each row from its source line so that spanning columns
(``| wide ||``), unpadded rows and extra cells can be honoured, and can
swap in a table rule that tolerates a separator row of a different width.
"""

from __future__ import annotations

import re
from collections.abc import Callable

from markdown_it import MarkdownIt
from markdown_it.rules_block import StateBlock
from markdown_it.rules_block.table import escapedSplit
from markdown_it.rules_core import StateCore
from markdown_it.token import Token

_CONTAINER_PREFIX_RE = re.compile(r"^\s*(?:>\s?)*")
_SEPARATOR_CELL_RE = re.compile(r"^:?-+:?$")
_SEPARATOR_CHARS = frozenset("|-:")
MAX_AUTOCOMPLETED_CELLS = 0x10000


def tables_plugin(
    md: MarkdownIt,
    *,
    column_spans: bool = True,
    append_missing_columns: bool = True,
    discard_extra_columns: bool = True,
    class_name: str = "",
    header_separation_column_match: bool = True,
) -> None:
    """Enable GFM tables with layout options.

    :param column_spans: ``||`` directly after a cell makes it span the next column
    :param append_missing_columns: pad short body rows up to the header width
    :param discard_extra_columns: drop body cells beyond the header width
    :param class_name: class attribute for ``<table>``; empty for none
    :param header_separation_column_match: when False, a separator row wider
        or narrower than the header still starts a table
    """
    md.enable("table")
    if not header_separation_column_match:
        md.block.ruler.at("table", _lenient_table, {"alt": ["paragraph", "reference"]})
    md.core.ruler.after(
        "block",
        "table_layout",
        _make_layout_func(column_spans, append_missing_columns, discard_extra_columns, class_name),
    )


def split_row(line: str) -> list[str]:
    """Split a table row into raw cells, keeping the whitespace of each cell."""
    return _split_cells(_CONTAINER_PREFIX_RE.sub("", line, count=1).strip())


def _split_cells(text: str) -> list[str]:
    columns = escapedSplit(text)
    if columns and columns[0] == "":
        columns.pop(0)
    if columns and columns[-1] == "":
        columns.pop()
    return columns


def _line(state: StateBlock, line: int) -> str:
    return state.src[state.bMarks[line] + state.tShift[line] : state.eMarks[line]]


def _is_code_line(state: StateBlock, line: int) -> bool:
    return state.sCount[line] - state.blkIndent >= 4


def _separator_aligns(text: str) -> list[str] | None:
    if len(text) < 2 or text[0] not in _SEPARATOR_CHARS:
        return None
    if text[1] not in _SEPARATOR_CHARS and not text[1].isspace():
        return None
    # A leading "- " is a list item.
    if text[0] == "-" and text[1].isspace():
        return None
    if any(ch not in _SEPARATOR_CHARS and not ch.isspace() for ch in text):
        return None

    columns = text.split("|")
    aligns: list[str] = []
    for i, column in enumerate(columns):
        cell = column.strip()
        if not cell:
            if i == 0 or i == len(columns) - 1:
                continue
            return None
        if not _SEPARATOR_CELL_RE.match(cell):
            return None
        if cell.endswith(":"):
            aligns.append("center" if cell.startswith(":") else "right")
        elif cell.startswith(":"):
            aligns.append("left")
        else:
            aligns.append("")
    return aligns


def _lenient_table(state: StateBlock, startLine: int, endLine: int, silent: bool) -> bool:
    """markdown-it's table rule, except the separator row is fitted to the header width."""
    if startLine + 2 > endLine:
        return False
    nextLine = startLine + 1
    if state.sCount[nextLine] < state.blkIndent or _is_code_line(state, nextLine):
        return False
    aligns = _separator_aligns(_line(state, nextLine))
    if aligns is None:
        return False

    header = _line(state, startLine).strip()
    if "|" not in header or _is_code_line(state, startLine):
        return False
    columns = _split_cells(header)
    columnCount = len(columns)
    if columnCount == 0 or not aligns:
        return False
    aligns = (aligns + [""] * columnCount)[:columnCount]

    if silent:
        return True

    oldParentType = state.parentType
    state.parentType = "table"
    terminatorRules = state.md.block.ruler.getRules("blockquote")

    token = state.push("table_open", "table", 1)
    token.map = tableLines = [startLine, 0]
    token = state.push("thead_open", "thead", 1)
    token.map = [startLine, startLine + 1]
    token = state.push("tr_open", "tr", 1)
    token.map = [startLine, startLine + 1]
    for i, column in enumerate(columns):
        _push_cell(state, "th", aligns[i], column.strip(), startLine)
    state.push("tr_close", "tr", -1)
    state.push("thead_close", "thead", -1)

    tbodyLines: list[int] | None = None
    autocompleted = 0
    nextLine = startLine + 2
    while nextLine < endLine:
        if state.sCount[nextLine] < state.blkIndent:
            break
        if any(rule(state, nextLine, endLine, True) for rule in terminatorRules):
            break
        text = _line(state, nextLine).strip()
        if not text or _is_code_line(state, nextLine):
            break
        cells = _split_cells(text)
        autocompleted += columnCount - len(cells)
        if autocompleted > MAX_AUTOCOMPLETED_CELLS:
            break

        if tbodyLines is None:
            token = state.push("tbody_open", "tbody", 1)
            token.map = tbodyLines = [startLine + 2, 0]
        token = state.push("tr_open", "tr", 1)
        token.map = [nextLine, nextLine + 1]
        for i in range(columnCount):
            content = cells[i].strip() if i < len(cells) else ""
            _push_cell(state, "td", aligns[i], content, nextLine)
        state.push("tr_close", "tr", -1)
        nextLine += 1

    if tbodyLines is not None:
        state.push("tbody_close", "tbody", -1)
        tbodyLines[1] = nextLine
    state.push("table_close", "table", -1)

    tableLines[1] = nextLine
    state.parentType = oldParentType
    state.line = nextLine
    return True


def _push_cell(state: StateBlock, kind: str, align: str, content: str, line: int) -> None:
    token = state.push(f"{kind}_open", kind, 1)
    if align:
        token.attrs = {"style": f"text-align:{align}"}
    token = state.push("inline", "", 0)
    token.map = [line, line + 1]
    token.content = content
    token.children = []
    state.push(f"{kind}_close", kind, -1)


def _make_layout_func(
    column_spans: bool,
    append_missing_columns: bool,
    discard_extra_columns: bool,
    class_name: str,
) -> Callable[[StateCore], None]:
    def _layout_func(state: StateCore) -> None:
        lines = state.src.split("\n")
        tokens = state.tokens
        rebuilt: list[Token] = []
        aligns: list[str] = []
        width = 0
        in_head = False
        index = 0
        while index < len(tokens):
            token = tokens[index]
            if token.type == "table_open":
                if class_name:
                    token.attrSet("class", class_name)
                aligns, width = [], 0
            elif token.type == "thead_open":
                in_head = True
            elif token.type == "thead_close":
                in_head = False
            elif token.type == "tr_open":
                end = index + 1
                while tokens[end].type != "tr_close":
                    end += 1
                cells = tokens[index + 1 : end]
                if in_head:
                    aligns = [str(cell.attrGet("style") or "") for cell in cells if cell.nesting == 1]
                    width = len(aligns)
                row = _rebuild_row(
                    token,
                    cells,
                    lines,
                    kind="th" if in_head else "td",
                    aligns=aligns,
                    width=width,
                    column_spans=column_spans,
                    append_missing_columns=append_missing_columns,
                    discard_extra_columns=discard_extra_columns,
                )
                rebuilt.append(token)
                rebuilt.extend(row)
                rebuilt.append(tokens[end])
                index = end + 1
                continue
            rebuilt.append(token)
            index += 1
        state.tokens[:] = rebuilt

    return _layout_func


def _rebuild_row(
    row_open: Token,
    cells: list[Token],
    lines: list[str],
    *,
    kind: str,
    aligns: list[str],
    width: int,
    column_spans: bool,
    append_missing_columns: bool,
    discard_extra_columns: bool,
) -> list[Token]:
    if row_open.map is None or row_open.map[0] >= len(lines):
        return cells
    raw = split_row(lines[row_open.map[0]])
    parsed = [cell.content for cell in cells if cell.type == "inline"]
    if kind == "th" and len(raw) != len(parsed):
        return cells
    # The source line must agree with what markdown-it parsed, otherwise the
    # row lives in a container we cannot map back to its text.
    if any(raw[i].strip() != parsed[i] for i in range(min(len(raw), len(parsed)))):
        return cells

    spans: list[list] = []
    for text in raw:
        if column_spans and text == "" and spans:
            spans[-1][1] += 1
        else:
            spans.append([text.strip(), 1])

    if kind == "td":
        total = sum(span for _, span in spans)
        if total < width and append_missing_columns:
            spans.extend(["", 1] for _ in range(width - total))
        elif total > width and discard_extra_columns:
            trimmed: list[list] = []
            remaining = width
            for content, span in spans:
                if remaining <= 0:
                    break
                trimmed.append([content, min(span, remaining)])
                remaining -= span
            spans = trimmed

    level = cells[0].level if cells else row_open.level + 1
    row: list[Token] = []
    column = 0
    for content, span in spans:
        cell_open = Token(f"{kind}_open", kind, 1, level=level, block=True)
        if column < len(aligns) and aligns[column]:
            cell_open.attrSet("style", aligns[column])
        if span > 1:
            cell_open.attrSet("colspan", str(span))
        inline = Token(
            "inline",
            "",
            0,
            map=list(row_open.map),
            level=level + 1,
            content=content,
            children=[],
            block=True,
        )
        cell_close = Token(f"{kind}_close", kind, -1, level=level, block=True)
        row.extend((cell_open, inline, cell_close))
        column += span
    return row
