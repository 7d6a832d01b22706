"""
Response Renderer - turns the model's markdown-like text into accessible blocks.

Line-oriented and deliberately not a full markdown parser. Rules, first
match wins:

    "## "  prefix           -> sub-heading
    "# "   prefix           -> heading
    "* " / "- " (trimmed)   -> bullet item
    contains "**"           -> paragraph split on every "**", odd runs bold
    blank                   -> spacer
    anything else           -> paragraph

The bold split is a plain split, so an odd number of delimiters leaves the
trailing run bold. Bullet and heading text keeps any inline "**" verbatim.
"""

from __future__ import annotations

import html
import re
from dataclasses import dataclass
from datetime import UTC, date, datetime
from enum import Enum

from companion.config import EXPORT_FILENAME_PREFIX

BOLD_DELIMITER = "**"
_BULLET_MARKER = re.compile(r"^[*\-]\s+")


class BlockKind(str, Enum):
    HEADING = "heading"
    SUBHEADING = "subheading"
    BULLET = "bullet"
    PARAGRAPH = "paragraph"
    SPACER = "spacer"


@dataclass(frozen=True)
class Run:
    text: str
    bold: bool = False


@dataclass(frozen=True)
class Block:
    kind: BlockKind
    runs: tuple[Run, ...] = ()

    @property
    def text(self) -> str:
        return "".join(run.text for run in self.runs)

    def to_dict(self) -> dict:
        return {
            "kind": self.kind.value,
            "text": self.text,
            "runs": [{"text": run.text, "bold": run.bold} for run in self.runs],
        }


def _plain(kind: BlockKind, text: str) -> Block:
    return Block(kind=kind, runs=(Run(text),))


def render_line(line: str) -> Block:
    if line.startswith("## "):
        return _plain(BlockKind.SUBHEADING, line.replace("## ", "", 1))
    if line.startswith("# "):
        return _plain(BlockKind.HEADING, line.replace("# ", "", 1))

    stripped = line.strip()
    if stripped.startswith("* ") or stripped.startswith("- "):
        # Marker removal is anchored on the untrimmed line
        return _plain(BlockKind.BULLET, _BULLET_MARKER.sub("", line, count=1))

    if BOLD_DELIMITER in line:
        parts = line.split(BOLD_DELIMITER)
        return Block(
            kind=BlockKind.PARAGRAPH,
            runs=tuple(Run(part, bold=i % 2 == 1) for i, part in enumerate(parts)),
        )

    if stripped == "":
        return Block(kind=BlockKind.SPACER)

    return _plain(BlockKind.PARAGRAPH, line)


def render(text: str) -> list[Block]:
    """Render response text into one block per line."""
    if not text:
        return []
    return [render_line(line) for line in text.split("\n")]


def _runs_html(block: Block) -> str:
    return "".join(
        f"<strong>{html.escape(run.text)}</strong>" if run.bold else html.escape(run.text)
        for run in block.runs
    )


def render_html(blocks: list[Block]) -> str:
    """
    Accessible HTML for a block list.

    Consecutive bullet items are grouped into one <ul>; spacers are hidden
    from assistive technology.
    """
    out: list[str] = []
    in_list = False

    for block in blocks:
        if block.kind is BlockKind.BULLET:
            if not in_list:
                out.append("<ul>")
                in_list = True
            out.append(f"<li>{_runs_html(block)}</li>")
            continue

        if in_list:
            out.append("</ul>")
            in_list = False

        if block.kind is BlockKind.HEADING:
            out.append(f"<h2>{_runs_html(block)}</h2>")
        elif block.kind is BlockKind.SUBHEADING:
            out.append(f"<h3>{_runs_html(block)}</h3>")
        elif block.kind is BlockKind.SPACER:
            out.append('<div class="spacer" aria-hidden="true"></div>')
        else:
            out.append(f"<p>{_runs_html(block)}</p>")

    if in_list:
        out.append("</ul>")

    return '<div role="article">' + "".join(out) + "</div>"


def export_filename(today: date | None = None) -> str:
    """Download name for an exported result, dated in UTC."""
    today = today or datetime.now(UTC).date()
    return f"{EXPORT_FILENAME_PREFIX}-{today.isoformat()}.txt"
