"""CMS-specific conventions applied while converting a document.

The converter delegates two decisions to a policy object: which blocks to emit
in front of a heading, and how a table is represented. The default policy
reproduces the blog CMS conventions (anchor blok before every H2, tables as an
embedded HTML blok).
"""

import html

from docblog.richtext.models import BlockNode, BlokNode

ANCHOR_COMPONENT = "anchor"
HTML_EMBED_COMPONENT = "video embed code"

TABLE_CSS = """
<style>
  .styled-table {
    border-collapse: collapse;
    margin: 25px 0;
    font-size: 0.9em;
    font-family: Noto Sans JP;
    min-width: 400px;
    border-radius: 5px 5px 0 0;
    overflow: hidden;
    box-shadow: 0 0 20px rgba(0, 0, 0, 0.15);
  }
  .styled-table thead tr {
    background-color: #4e81e9;
    color: #ffffff;
    text-align: left;
    font-weight: bold;
  }
  .styled-table th,
  .styled-table td {
    padding: 12px 15px;
  }
  .styled-table tbody tr {
    border-bottom: 1px solid #dddddd;
  }
  .styled-table tbody tr:nth-of-type(even) {
    background-color: #f3f3f3;
  }
  .styled-table tbody tr:last-of-type {
    border-bottom: 2px solid #4e81e9;
  }
</style>"""


def render_html_table(rows: list[list[str]]) -> str:
    """Render rows as a styled HTML table. The first row is the header."""
    parts = ['<table class="styled-table" style="margin: 0 auto">']
    if rows:
        parts.append("<thead><tr>")
        parts.extend(f"<th>{html.escape(cell, quote=False)}</th>" for cell in rows[0])
        parts.append("</tr></thead>")
        parts.append("<tbody>")
        for row in rows[1:]:
            parts.append("<tr>")
            parts.extend(f"<td>{html.escape(cell, quote=False)}</td>" for cell in row)
            parts.append("</tr>")
        parts.append("</tbody>")
    parts.append("</table>")
    return TABLE_CSS + "".join(parts)


class ConversionPolicy:
    """Default blog conventions. Subclass to change them."""

    def __init__(self, anchor_heading_level: int | None = 2):
        self.anchor_heading_level = anchor_heading_level

    def heading_prelude(self, level: int, text: str) -> list[BlockNode]:
        """Blocks emitted immediately before a heading of the given level."""
        if level != self.anchor_heading_level or not text.strip():
            return []
        return [BlokNode.single(ANCHOR_COMPONENT, description=text.strip())]

    def table_block(self, rows: list[list[str]]) -> BlockNode:
        return BlokNode.single(HTML_EMBED_COMPONENT, code=render_html_table(rows))


class PlainPolicy(ConversionPolicy):
    """No anchors; tables still use the HTML escape hatch."""

    def __init__(self):
        super().__init__(anchor_heading_level=None)
