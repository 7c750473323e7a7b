"""Markdown-subset renderer for assistant replies.

The supported subset is deliberately small: ``#``/``##``/``###`` headings,
``-``/``*`` and ``1.`` list items, fenced code blocks, ``**bold**`` and
`` `code` `` inline spans, and blank-line spacers. Everything else renders as
a plain paragraph.

``render`` turns text into a flat list of blocks; ``to_rich`` turns those
blocks into a :class:`rich.text.Text` for display. Neither ever raises.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import re
from typing import Literal, Union

from rich.text import Text

FENCE = "```"

_HEADING_PREFIXES: tuple[tuple[str, int], ...] = (("### ", 3), ("## ", 2), ("# ", 1))
_UNORDERED_PREFIXES: tuple[str, ...] = ("- ", "* ")
_ORDERED_RE = re.compile(r"^\d+\.\s")
_BOLD_RE = re.compile(r"\*\*(.*?)\*\*")
_CODE_RE = re.compile(r"`([^`]+)`")

SpanKind = Literal["plain", "bold", "code"]


@dataclass(frozen=True)
class Span:
    """A run of inline text; ``bold`` and ``code`` may both be set."""

    text: str
    bold: bool = False
    code: bool = False

    @property
    def kind(self) -> SpanKind:
        if self.code:
            return "code"
        if self.bold:
            return "bold"
        return "plain"


@dataclass(frozen=True)
class Heading:
    level: int
    text: str
    spans: tuple[Span, ...] = ()


@dataclass(frozen=True)
class ListItem:
    ordered: bool
    text: str
    spans: tuple[Span, ...] = ()


@dataclass(frozen=True)
class Paragraph:
    text: str
    spans: tuple[Span, ...] = ()


@dataclass(frozen=True)
class Spacer:
    pass


@dataclass(frozen=True)
class CodeBlock:
    lines: tuple[str, ...] = field(default_factory=tuple)
    language: str = ""

    @property
    def code(self) -> str:
        return "\n".join(self.lines)


Block = Union[Heading, ListItem, Paragraph, Spacer, CodeBlock]


def split_inline(text: str) -> list[Span]:
    """Split ``text`` into bold/code/plain spans, keeping empty spans in place.

    Bold markers are resolved first; every resulting run, bold or plain, is
    then split on single-backtick code spans. Zero-length runs produced by a
    marker at either end of the text are kept so span positions stay stable.
    """
    spans: list[Span] = []
    for bold_index, bold_part in enumerate(_BOLD_RE.split(text)):
        bold = bold_index % 2 == 1
        for code_index, code_part in enumerate(_CODE_RE.split(bold_part)):
            spans.append(Span(code_part, bold=bold, code=code_index % 2 == 1))
    return spans


def visible_spans(text: str) -> tuple[Span, ...]:
    """Return the inline spans of ``text`` that carry visible content."""
    return tuple(span for span in split_inline(text) if span.text)


def _classify(line: str) -> Block:
    for prefix, level in _HEADING_PREFIXES:
        if line.startswith(prefix):
            body = line[len(prefix) :]
            return Heading(level=level, text=body, spans=visible_spans(body))
    if line.startswith(_UNORDERED_PREFIXES):
        body = line[2:]
        return ListItem(ordered=False, text=body, spans=visible_spans(body))
    match = _ORDERED_RE.match(line)
    if match:
        body = line[match.end() :]
        return ListItem(ordered=True, text=body, spans=visible_spans(body))
    if not line.strip():
        return Spacer()
    return Paragraph(text=line, spans=visible_spans(line))


def render(text: str) -> list[Block]:
    """Convert markdown-subset ``text`` into an ordered list of blocks.

    Lines inside a fence are collected verbatim. A fence left open at the end
    of the input is still flushed as a code block when it collected any lines.
    """
    if not text:
        return []

    blocks: list[Block] = []
    in_fence = False
    fence_language = ""
    fence_lines: list[str] = []

    for line in text.split("\n"):
        if line.startswith(FENCE):
            if not in_fence:
                in_fence = True
                fence_language = line[len(FENCE) :].strip()
                fence_lines = []
            else:
                in_fence = False
                blocks.append(CodeBlock(lines=tuple(fence_lines), language=fence_language))
                fence_lines = []
            continue

        if in_fence:
            fence_lines.append(line)
            continue

        blocks.append(_classify(line))

    if in_fence and fence_lines:
        blocks.append(CodeBlock(lines=tuple(fence_lines), language=fence_language))

    return blocks


_HEADING_STYLES = {1: "bold underline", 2: "bold", 3: "bold italic"}


def _append_spans(target: Text, spans: tuple[Span, ...], base_style: str = "") -> None:
    for span in spans:
        styles = [base_style] if base_style else []
        if span.bold:
            styles.append("bold")
        if span.code:
            styles.append("reverse")
        target.append(span.text, style=" ".join(styles) or None)


def to_rich(blocks: list[Block]) -> Text:
    """Lay blocks out as a single rich ``Text`` for terminal display."""
    output = Text()
    ordinal = 0
    for index, block in enumerate(blocks):
        if index:
            output.append("\n")
        if isinstance(block, ListItem) and block.ordered:
            ordinal += 1
        else:
            ordinal = 0

        if isinstance(block, Heading):
            _append_spans(output, block.spans, _HEADING_STYLES[block.level])
        elif isinstance(block, ListItem):
            output.append(f"{ordinal}. " if block.ordered else "• ")
            _append_spans(output, block.spans)
        elif isinstance(block, Paragraph):
            _append_spans(output, block.spans)
        elif isinstance(block, CodeBlock):
            output.append(block.code, style="dim")
        # Spacer contributes only the line break.
    return output
