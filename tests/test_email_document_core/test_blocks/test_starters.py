"""Tests for starter templates."""

import pytest

from email_document_core.blocks import STARTER_TEMPLATES, find_starter
from email_document_core.model import MAX_COLUMNS, NodeType, is_allowed_child
from email_document_core.tree import collect_ids, iter_nodes


@pytest.mark.parametrize("starter", STARTER_TEMPLATES, ids=lambda s: s.id)
class TestStarterTemplates:
    """Test each starter produces a usable document."""

    def test_legal_structure(self, starter):
        """Test the starter is structurally legal."""
        document = starter.create()

        assert document.body.type == NodeType.BODY
        for parent in iter_nodes(document.body):
            for child in parent.children:
                assert is_allowed_child(parent.type, child.type)
            if parent.type == NodeType.SECTION:
                assert len(parent.children) <= MAX_COLUMNS

    def test_unique_ids(self, starter):
        """Test identifiers are unique within a starter."""
        ids = collect_ids(starter.create().body)

        assert len(ids) == len(set(ids))

    def test_fresh_documents(self, starter):
        """Test each call builds a new document."""
        first = starter.create()
        second = starter.create()

        assert set(collect_ids(first.body)).isdisjoint(collect_ids(second.body))


class TestFindStarter:
    """Test starter lookup."""

    def test_known_ids(self):
        """Test every listed starter is found."""
        assert [find_starter(s.id) for s in STARTER_TEMPLATES] == STARTER_TEMPLATES

    def test_unknown_id(self):
        """Test unknown ids return None."""
        assert find_starter("holiday") is None

    def test_blank_is_default_document(self):
        """Test the blank starter is one section, one column, one text."""
        document = find_starter("blank").create()

        column = document.body.children[0].children[0]
        assert len(document.body.children) == 1
        assert [node.type for node in column.children] == [NodeType.TEXT]

    def test_styled_starters_declare_font(self):
        """Test non-blank starters ship head defaults and a preview."""
        for starter_id in ("newsletter", "welcome", "promotion"):
            head = find_starter(starter_id).create().head_attributes

            assert [font.name for font in head.fonts] == ["Roboto"]
            assert "mj-all" in head.default_styles
            assert head.preview_text

    def test_welcome_opens_with_hero(self):
        """Test the welcome starter starts with a hero."""
        document = find_starter("welcome").create()

        assert document.body.children[0].type == NodeType.HERO

    def test_promotion_uses_wrapper(self):
        """Test the promotion groups its sections in a wrapper."""
        wrapper = find_starter("promotion").create().body.children[0]

        assert wrapper.type == NodeType.WRAPPER
        assert len(wrapper.children[1].children) == 3
