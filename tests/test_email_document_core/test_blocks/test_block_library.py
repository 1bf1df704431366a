"""Tests for the block library."""

import pytest

from email_document_core.blocks import (
    ALL_BLOCKS,
    COMPOSITE_BLOCKS,
    LAYOUT_BLOCKS,
    BlockCategory,
    all_blocks,
    blocks_by_category,
    find_block,
    variable_blocks,
)
from email_document_core.model import (
    MAX_COLUMNS,
    NodeType,
    create_body,
    create_column,
    is_allowed_child,
)
from email_document_core.tree import collect_ids, iter_nodes


def assert_legal(node):
    for parent in iter_nodes(node):
        for child in parent.children:
            assert is_allowed_child(parent.type, child.type)
        if parent.type == NodeType.SECTION:
            assert len(parent.children) <= MAX_COLUMNS


class TestBlockLibrary:
    """Test the block catalogue."""

    def test_ids_unique(self):
        """Test every block id is distinct."""
        ids = [block.id for block in ALL_BLOCKS]

        assert len(ids) == len(set(ids))

    def test_find_block(self):
        """Test lookup by id."""
        assert find_block("layout-3-col").label == "3 columns"
        assert find_block("missing") is None

    def test_grouping(self):
        """Test every category is present and blocks keep their order."""
        groups = blocks_by_category()

        assert list(groups) == list(BlockCategory)
        assert sum(len(blocks) for blocks in groups.values()) == len(ALL_BLOCKS)
        assert groups[BlockCategory.LAYOUT] == LAYOUT_BLOCKS
        assert groups[BlockCategory.VARIABLE] == []

    @pytest.mark.parametrize("block", LAYOUT_BLOCKS + COMPOSITE_BLOCKS, ids=lambda b: b.id)
    def test_section_blocks_fit_body(self, block):
        """Test layout and composite blocks are legal body children."""
        node = block.create()

        assert node.type in (NodeType.SECTION, NodeType.HERO, NodeType.WRAPPER)
        assert is_allowed_child(NodeType.BODY, node.type)
        assert_legal(create_body([node]))

    @pytest.mark.parametrize("block", [b for b in ALL_BLOCKS if b.category == BlockCategory.CONTENT],
                             ids=lambda b: b.id)
    def test_content_blocks_fit(self, block):
        """Test content blocks fit a column, or the body for the hero."""
        node = block.create()
        parent = create_body([node]) if node.type == NodeType.HERO else create_column([node])

        assert_legal(parent)

    @pytest.mark.parametrize("block_id,widths", [
        ("layout-1-col", ["100%"]),
        ("layout-2-col", ["50%", "50%"]),
        ("layout-4-col", ["25%"] * 4),
        ("layout-sidebar-left", ["33%", "67%"]),
        ("layout-sidebar-right", ["67%", "33%"]),
    ])
    def test_layout_widths(self, block_id, widths):
        """Test column widths of layout blocks."""
        section = find_block(block_id).create()

        assert [column.attributes.get("width") for column in section.children] == widths

    def test_fresh_ids_per_create(self):
        """Test two instances of a block share no identifiers."""
        block = find_block("composite-footer")

        assert set(collect_ids(block.create())).isdisjoint(collect_ids(block.create()))

    def test_footer_has_social_links(self):
        """Test the footer composite includes a social group."""
        footer = find_block("composite-footer").create()
        types = [node.type for node in iter_nodes(footer)]

        assert NodeType.SOCIAL in types
        assert types.count(NodeType.SOCIAL_ELEMENT) == 3


class TestCompositeBlocks:
    """Test the pre-designed composite catalogue."""

    def test_catalogue(self):
        """Test the composite ids, in display order."""
        assert [block.id for block in COMPOSITE_BLOCKS] == [
            "composite-header", "composite-header-nav", "composite-hero",
            "composite-hero-gradient", "composite-img-text", "composite-text-img",
            "composite-cta", "composite-image-grid", "composite-features",
            "composite-testimonial", "composite-pricing", "composite-coupon",
            "composite-video", "composite-social", "composite-footer",
            "composite-footer-minimal", "composite-separator", "composite-product-card",
            "composite-notification", "composite-stats", "composite-announcement",
            "composite-timeline", "composite-order-summary", "composite-faq",
            "composite-team", "composite-countdown", "composite-review",
            "composite-app-download",
        ]
        assert all(block.category == BlockCategory.COMPOSITE for block in COMPOSITE_BLOCKS)

    @pytest.mark.parametrize("block_id,sections", [
        ("composite-image-grid", 2),
        ("composite-order-summary", 4),
    ])
    def test_multi_section_blocks_wrapped(self, block_id, sections):
        """Test designs spanning several sections come as one wrapper."""
        wrapper = find_block(block_id).create()

        assert wrapper.type == NodeType.WRAPPER
        assert [child.type for child in wrapper.children] == [NodeType.SECTION] * sections

    def test_hero_banner(self):
        """Test the hero composite carries its background image."""
        hero = find_block("composite-hero").create()

        assert hero.type == NodeType.HERO
        assert hero.attributes["background-url"].startswith("https://")
        assert [child.type for child in hero.children] == [
            NodeType.TEXT, NodeType.TEXT, NodeType.BUTTON,
        ]

    @pytest.mark.parametrize("block_id", [
        "composite-features", "composite-stats", "composite-timeline",
        "composite-team", "composite-product-card",
    ])
    def test_three_column_blocks(self, block_id):
        """Test three-up designs split the section evenly."""
        section = find_block(block_id).create()

        assert [column.attributes["width"] for column in section.children] == ["33.33%"] * 3

    def test_pricing_highlights_one_plan(self):
        """Test only the second pricing plan is featured."""
        basic, featured = find_block("composite-pricing").create().children

        assert "background-color" not in basic.attributes
        assert featured.attributes["background-color"] == "#f0fdfd"
        assert "Popular" in featured.children[0].html_content

    def test_faq_separates_questions(self):
        """Test dividers sit between questions only."""
        column = find_block("composite-faq").create().children[0]
        types = [child.type for child in column.children]

        assert types.count(NodeType.DIVIDER) == 2
        assert types[-1] == NodeType.TEXT


class TestVariableBlocks:
    """Test blocks generated from template variables."""

    def test_one_block_per_variable(self):
        """Test each variable yields a text block holding its merge tag."""
        blocks = variable_blocks(["first_name", "order.total"])

        assert [block.id for block in blocks] == ["variable-first_name", "variable-order.total"]
        assert [block.label for block in blocks] == ["first_name", "order.total"]
        assert all(block.category == BlockCategory.VARIABLE for block in blocks)
        node = blocks[1].create()
        assert node.type == NodeType.TEXT
        assert node.html_content == "<p>{{order.total}}</p>"

    def test_each_block_keeps_its_own_variable(self):
        """Test factories do not share the last variable name."""
        first, second = variable_blocks(["a", "b"])

        assert first.create().html_content == "<p>{{a}}</p>"
        assert second.create().html_content == "<p>{{b}}</p>"

    def test_invalid_and_repeated_names_skipped(self):
        """Test names that cannot form a merge tag are ignored and duplicates collapse."""
        blocks = variable_blocks(["plan", " plan ", "", "1st", "has space", "x}}"])

        assert [block.id for block in blocks] == ["variable-plan"]

    def test_lookup_and_grouping(self):
        """Test variable blocks join the catalogue only when variables are given."""
        groups = blocks_by_category(["city"])

        assert [block.id for block in groups[BlockCategory.VARIABLE]] == ["variable-city"]
        assert find_block("variable-city", ["city"]).label == "city"
        assert find_block("variable-city") is None
        assert all_blocks(["city"])[:len(ALL_BLOCKS)] == ALL_BLOCKS

    def test_fits_column(self):
        """Test a variable block is a legal column child."""
        assert_legal(create_column([variable_blocks(["city"])[0].create()]))
