from docblog.richtext.policies import (
    ANCHOR_COMPONENT,
    HTML_EMBED_COMPONENT,
    ConversionPolicy,
    PlainPolicy,
    render_html_table,
)


def test_render_html_table_escapes_cells():
    html = render_html_table([["<b>Name</b>"], ['Tom & "Jerry"']])

    assert "<th>&lt;b&gt;Name&lt;/b&gt;</th>" in html
    assert '<td>Tom &amp; "Jerry"</td>' in html
    assert "<b>Name</b>" not in html


def test_render_html_table_includes_styles():
    html = render_html_table([["A"]])
    assert html.startswith("\n<style>")
    assert html.endswith("<tbody></tbody></table>")


def test_render_empty_table():
    assert render_html_table([]).endswith('<table class="styled-table" style="margin: 0 auto"></table>')


def test_table_block_uses_html_embed_component():
    blok = ConversionPolicy().table_block([["A"], ["1"]])
    (component,) = blok.attrs.body
    assert component.component == HTML_EMBED_COMPONENT
    assert component.code == render_html_table([["A"], ["1"]])


def test_heading_prelude():
    policy = ConversionPolicy()

    (anchor,) = policy.heading_prelude(2, " Section ")
    assert anchor.attrs.body[0].component == ANCHOR_COMPONENT
    assert anchor.attrs.body[0].description == "Section"

    assert policy.heading_prelude(2, "   ") == []
    assert policy.heading_prelude(1, "Title") == []
    assert PlainPolicy().heading_prelude(2, "Section") == []
