"""Tests for Google Docs -> richtext conversion."""

import asyncio
import itertools

import pytest

from docblog.richtext.converter import DocumentConverter, color_to_rgb, convert_document, is_external_link
from docblog.richtext.models import BlokNode, HeadingNode, ImageNode, ParagraphNode, TextNode
from docblog.richtext.policies import ConversionPolicy, PlainPolicy
from docblog.richtext.source import OptionalColor


def texts(node) -> list[str]:
    return [child.text for child in node.content if isinstance(child, TextNode)]


async def convert(doc, **kwargs):
    return (await convert_document(doc, **kwargs)).content


class TestEndToEnd:
    @pytest.mark.asyncio
    async def test_headings_paragraph_and_nested_list(self, build):
        doc = build.document(
            build.heading("Intro", 1),
            build.heading("Details", 2),
            build.paragraph(build.text_run("See more.\n")),
            build.paragraph(build.text_run("First\n"), list_id="l1", level=0),
            build.paragraph(build.text_run("Second\n"), list_id="l1", level=0),
            build.paragraph(build.text_run("Second, nested\n"), list_id="l1", level=1),
            lists={"l1": build.bullet_list_props(None, None)},
        )

        payload = (await convert_document(doc)).to_payload()
        blocks = payload["content"]

        assert payload["type"] == "doc"
        assert [b["type"] for b in blocks] == ["heading", "blok", "heading", "paragraph", "bullet_list"]
        assert blocks[0]["attrs"] == {"level": 1}
        assert blocks[0]["content"] == [{"type": "text", "text": "Intro", "marks": []}]
        assert blocks[1]["attrs"]["body"] == [{"component": "anchor", "description": "Details"}]
        assert blocks[2]["attrs"] == {"level": 2}
        assert blocks[2]["content"][0]["text"] == "Details"
        assert blocks[3]["content"][0]["text"] == "See more."

        items = blocks[4]["content"]
        assert [item["type"] for item in items] == ["list_item", "list_item"]
        assert items[0]["content"][0]["content"][0]["text"] == "First"
        second_para, nested = items[1]["content"]
        assert second_para["content"][0]["text"] == "Second"
        assert nested["type"] == "bullet_list"
        assert len(nested["content"]) == 1
        assert nested["content"][0]["type"] == "list_item"
        assert nested["content"][0]["content"][0]["content"][0]["text"] == "Second, nested"

    @pytest.mark.asyncio
    async def test_section_breaks_produce_nothing(self, build):
        blocks = await convert(build.document())
        assert blocks == []


class TestHeadings:
    @pytest.mark.asyncio
    async def test_anchor_precedes_every_h2(self, build):
        doc = build.document(
            build.heading("One", 2),
            build.paragraph(build.text_run("Body\n")),
            build.heading("Two", 2),
        )
        blocks = await convert(doc)

        assert [b.type for b in blocks] == ["blok", "heading", "paragraph", "blok", "heading"]
        for anchor, head in [(blocks[0], blocks[1]), (blocks[3], blocks[4])]:
            assert isinstance(anchor, BlokNode)
            assert anchor.attrs.body[0].component == "anchor"
            assert anchor.attrs.body[0].description == texts(head)[0]

    @pytest.mark.asyncio
    async def test_empty_h2_has_no_anchor(self, build):
        doc = build.document(build.paragraph(build.text_run("\n"), style="HEADING_2"))
        blocks = await convert(doc)

        assert len(blocks) == 1
        assert isinstance(blocks[0], HeadingNode)
        assert blocks[0].content == []

    @pytest.mark.asyncio
    async def test_other_levels_have_no_anchor(self, build):
        doc = build.document(build.heading("Title", 1), build.heading("Sub", 3), build.heading("Deep", 6))
        blocks = await convert(doc)
        assert [(b.type, b.level) for b in blocks] == [("heading", 1), ("heading", 3), ("heading", 6)]

    @pytest.mark.asyncio
    async def test_plain_policy_disables_anchors(self, build):
        blocks = await convert(build.document(build.heading("Details", 2)), policy=PlainPolicy())
        assert [b.type for b in blocks] == ["heading"]

    @pytest.mark.asyncio
    async def test_anchor_level_is_configurable(self, build):
        doc = build.document(build.heading("Two", 2), build.heading("Three", 3))
        blocks = await convert(doc, policy=ConversionPolicy(anchor_heading_level=3))
        assert [b.type for b in blocks] == ["heading", "blok", "heading"]

    @pytest.mark.asyncio
    async def test_title_and_normal_text_are_paragraphs(self, build):
        doc = build.document(
            build.paragraph(build.text_run("A title\n"), style="TITLE"),
            build.paragraph(build.text_run("Plain\n")),
        )
        blocks = await convert(doc)
        assert all(isinstance(b, ParagraphNode) for b in blocks)

    @pytest.mark.asyncio
    async def test_paragraph_without_style_is_paragraph(self, build):
        doc = build.document({"paragraph": {"elements": [build.text_run("Bare\n")]}})
        blocks = await convert(doc)
        assert isinstance(blocks[0], ParagraphNode)
        assert texts(blocks[0]) == ["Bare"]


class TestTextRuns:
    @pytest.mark.asyncio
    async def test_terminator_newline_is_dropped_only_at_paragraph_end(self, build):
        doc = build.document(
            build.paragraph(build.text_run("line one\n"), build.text_run("tail\n")),
        )
        blocks = await convert(doc)
        assert texts(blocks[0]) == ["line one\n", "tail"]

    @pytest.mark.asyncio
    async def test_empty_paragraph_is_kept(self, build):
        blocks = await convert(build.document(build.paragraph(build.text_run("\n"))))
        assert len(blocks) == 1
        assert blocks[0].content == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("flags", list(itertools.product([False, True], repeat=4)))
    async def test_marks_match_style_flags(self, build, flags):
        bold, italic, underline, strike = flags
        style = {"bold": bold, "italic": italic, "underline": underline, "strikethrough": strike}
        blocks = await convert(build.document(build.paragraph(build.text_run("styled\n", **style))))

        expected = {name for name, on in zip(["bold", "italic", "underline", "strike"], flags) if on}
        assert blocks[0].content[0].mark_types() == expected

    @pytest.mark.asyncio
    async def test_colors(self, build):
        style = {
            "foregroundColor": {"color": {"rgbColor": {"red": 1, "green": 0.5, "blue": 0}}},
            "backgroundColor": {"color": {"rgbColor": {"red": 0.2, "green": 0.2, "blue": 0.2}}},
        }
        blocks = await convert(build.document(build.paragraph(build.text_run("color\n", **style))))
        marks = blocks[0].content[0].model_dump()["marks"]
        assert marks == [
            {"type": "textStyle", "attrs": {"color": "rgb(255, 128, 0)"}},
            {"type": "highlight", "attrs": {"color": "rgb(51, 51, 51)"}},
        ]

    def test_color_without_rgb_has_no_value(self):
        assert color_to_rgb(OptionalColor.model_validate({"color": {}})) is None
        assert color_to_rgb(None) is None
        assert color_to_rgb(OptionalColor.model_validate({"color": {"rgbColor": {}}})) == "rgb(0, 0, 0)"


class TestLinks:
    @pytest.mark.parametrize(
        "url, external",
        [
            ("https://foo.partner.com/page", True),
            ("https://blog.notta.ai/page", False),
            ("https://notta.ai", False),
            ("https://NOTTA.AI/Page", False),
            ("https://notnotta.ai/page", True),
            ("/path", False),
            ("#section", False),
            ("mailto:someone@example.com", False),
            ("https://", True),
        ],
    )
    def test_is_external_link(self, url, external):
        assert is_external_link(url, "notta.ai") is external

    @pytest.mark.asyncio
    async def test_link_mark_attrs(self, build):
        doc = build.document(
            build.paragraph(
                build.text_run("partner", link={"url": "https://foo.partner.com/x"}),
                build.text_run(" and "),
                build.text_run("ours\n", link={"url": "/pricing"}),
            )
        )
        content = (await convert(doc))[0].model_dump(exclude_none=True)["content"]

        assert content[0]["marks"] == [
            {
                "type": "link",
                "attrs": {"href": "https://foo.partner.com/x", "target": "_blank", "rel": "nofollow noreferrer"},
            }
        ]
        assert content[1]["marks"] == []
        assert content[2]["marks"] == [{"type": "link", "attrs": {"href": "/pricing", "target": "_blank"}}]

    @pytest.mark.asyncio
    async def test_owned_domain_is_configurable(self, build):
        doc = build.document(build.paragraph(build.text_run("x\n", link={"url": "https://blog.notta.ai/"})))
        blocks = await convert(doc, owned_domain="example.com")
        assert blocks[0].content[0].marks[0].attrs.rel == "nofollow noreferrer"

    @pytest.mark.asyncio
    async def test_link_without_url_is_ignored(self, build):
        doc = build.document(build.paragraph(build.text_run("x\n", link={"headingId": "h.1"})))
        blocks = await convert(doc)
        assert blocks[0].content[0].marks == []


class TestLists:
    @pytest.mark.asyncio
    async def test_decimal_glyph_makes_ordered_list(self, build):
        doc = build.document(
            build.paragraph(build.text_run("one\n"), list_id="l1"),
            build.paragraph(build.text_run("two\n"), list_id="l1"),
            lists={"l1": build.bullet_list_props("DECIMAL")},
        )
        blocks = await convert(doc)
        assert [b.type for b in blocks] == ["ordered_list"]
        assert len(blocks[0].content) == 2

    @pytest.mark.parametrize("glyph", ["UPPER_ALPHA", "LOWER_ROMAN", "ZERO_DECIMAL"])
    @pytest.mark.asyncio
    async def test_numbered_glyphs_are_ordered(self, build, glyph):
        doc = build.document(
            build.paragraph(build.text_run("x\n"), list_id="l1"),
            lists={"l1": build.bullet_list_props(glyph)},
        )
        assert (await convert(doc))[0].type == "ordered_list"

    @pytest.mark.asyncio
    async def test_unknown_list_is_bulleted(self, build):
        doc = build.document(build.paragraph(build.text_run("x\n"), list_id="missing"))
        assert (await convert(doc))[0].type == "bullet_list"

    @pytest.mark.asyncio
    async def test_converter_wraps_each_item_per_nesting_level(self, build):
        doc = build.document(
            build.paragraph(build.text_run("deep\n"), list_id="l1", level=2),
            lists={"l1": build.bullet_list_props(None, None, None)},
        )
        blocks = (await DocumentConverter().convert(doc)).content

        node = blocks[0]
        for _ in range(3):
            assert node.type == "bullet_list"
            assert len(node.content) == 1
            node = node.content[0]
        assert node.type == "list_item"

    @pytest.mark.asyncio
    async def test_lists_split_by_paragraph(self, build):
        doc = build.document(
            build.paragraph(build.text_run("a\n"), list_id="l1"),
            build.paragraph(build.text_run("between\n")),
            build.paragraph(build.text_run("b\n"), list_id="l1"),
        )
        assert [b.type for b in await convert(doc)] == ["bullet_list", "paragraph", "bullet_list"]


class TestTables:
    @pytest.mark.asyncio
    async def test_table_becomes_html_blok(self, build):
        blocks = await convert(build.document(build.table(["A", "B"], ["1", "2"])))

        assert len(blocks) == 1
        blok = blocks[0]
        assert isinstance(blok, BlokNode)
        component = blok.attrs.body[0]
        assert component.component == "video embed code"
        assert "<thead><tr><th>A</th><th>B</th></tr></thead>" in component.code
        assert "<tbody><tr><td>1</td><td>2</td></tr></tbody>" in component.code
        assert '<table class="styled-table"' in component.code

    @pytest.mark.asyncio
    async def test_cell_styling_is_flattened(self, build):
        styled_table = build.table(["H"], ["x"])
        cell = styled_table["table"]["tableRows"][1]["tableCells"][0]
        cell["content"] = [build.paragraph(build.text_run("bold", bold=True), build.text_run(" & plain\n"))]

        blocks = await convert(build.document(styled_table))
        assert "<td>bold &amp; plain</td>" in blocks[0].attrs.body[0].code


class TestImages:
    @pytest.mark.asyncio
    async def test_image_is_uploaded(self, build, fake_uploader):
        uploader = fake_uploader()
        doc = build.document(
            build.paragraph({"inlineObjectElement": {"inlineObjectId": "kix.1"}}, build.text_run("\n")),
            inline_objects={"kix.1": build.image_object("https://lh3.example/img", title="T", description="D")},
        )
        blocks = await convert(doc, uploader=uploader)

        image = blocks[0].content[0]
        assert isinstance(image, ImageNode)
        assert image.attrs.src == "https://cdn.example.com/1.png"
        assert image.attrs.alt == "D"
        assert image.attrs.title == "T"
        assert image.attrs.caption == "D"
        assert uploader.calls == [("https://lh3.example/img", "D")]

    @pytest.mark.asyncio
    async def test_unmodelled_api_fields_are_ignored(self, build, fake_uploader):
        uploader = fake_uploader()
        image = build.image_object("https://lh3.example/img", description="D")
        image["objectId"] = "kix.1"
        image["inlineObjectProperties"]["embeddedObject"]["imageProperties"]["sourceUri"] = "https://origin.example/i"
        doc = build.document(
            build.paragraph({"inlineObjectElement": {"inlineObjectId": "kix.1"}}),
            inline_objects={"kix.1": image},
        )
        await convert(doc, uploader=uploader)
        assert uploader.calls == [("https://lh3.example/img", "D")]

    @pytest.mark.asyncio
    async def test_alt_falls_back_to_title(self, build, fake_uploader):
        uploader = fake_uploader()
        doc = build.document(
            build.paragraph({"inlineObjectElement": {"inlineObjectId": "kix.1"}}),
            inline_objects={"kix.1": build.image_object("https://lh3.example/img", title="Only title")},
        )
        await convert(doc, uploader=uploader)
        assert uploader.calls == [("https://lh3.example/img", "Only title")]

    @pytest.mark.asyncio
    async def test_upload_failure_keeps_source_uri(self, build, fake_uploader):
        uploader = fake_uploader(fail_on={"https://lh3.example/broken"})
        doc = build.document(
            build.paragraph({"inlineObjectElement": {"inlineObjectId": "kix.1"}}),
            build.paragraph({"inlineObjectElement": {"inlineObjectId": "kix.2"}}),
            inline_objects={
                "kix.1": build.image_object("https://lh3.example/broken"),
                "kix.2": build.image_object("https://lh3.example/ok"),
            },
        )
        blocks = await convert(doc, uploader=uploader)

        assert blocks[0].content[0].attrs.src == "https://lh3.example/broken"
        assert blocks[1].content[0].attrs.src == "https://cdn.example.com/2.png"
        # Uploads happen in document order
        assert [uri for uri, _ in uploader.calls] == ["https://lh3.example/broken", "https://lh3.example/ok"]

    @pytest.mark.asyncio
    async def test_without_uploader_source_uri_is_used(self, build):
        doc = build.document(
            build.paragraph({"inlineObjectElement": {"inlineObjectId": "kix.1"}}),
            inline_objects={"kix.1": build.image_object("https://lh3.example/img")},
        )
        blocks = await convert(doc)
        assert blocks[0].content[0].attrs.src == "https://lh3.example/img"

    @pytest.mark.asyncio
    async def test_unknown_inline_object_is_skipped(self, build):
        doc = build.document(
            build.paragraph({"inlineObjectElement": {"inlineObjectId": "missing"}}, build.text_run("text\n"))
        )
        blocks = await convert(doc)
        assert texts(blocks[0]) == ["text"]
        assert len(blocks[0].content) == 1


@pytest.mark.asyncio
async def test_concurrent_conversions_share_no_state(build):
    converter = DocumentConverter()
    doc_a = build.document(
        build.paragraph(build.text_run("a\n"), list_id="l1"),
        lists={"l1": build.bullet_list_props("DECIMAL")},
    )
    doc_b = build.document(
        build.paragraph(build.text_run("b\n"), list_id="l1"),
        lists={"l1": build.bullet_list_props(None)},
    )

    results = await asyncio.gather(*(converter.convert(d) for d in [doc_a, doc_b, doc_a, doc_b]))
    assert [r.content[0].type for r in results] == ["ordered_list", "bullet_list", "ordered_list", "bullet_list"]
