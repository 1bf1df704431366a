"""Tests for the core document model."""

import pytest

from email_document_core.model import (
    ALLOWED_CHILDREN,
    CONTAINER_NODE_TYPES,
    CONTENT_NODE_TYPES,
    MAX_COLUMNS,
    SELF_CLOSING_NODE_TYPES,
    VALID_NODE_TAGS,
    ConditionalRule,
    ConditionOperator,
    Document,
    Node,
    NodeType,
    check_child,
    create_column,
    create_default_document,
    create_section,
    create_text,
    is_allowed_child,
)


class TestNodeType:
    """Test the node variant enumeration."""

    def test_thirteen_variants(self):
        """Test the closed set of variants."""
        assert len(NodeType) == 13
        assert VALID_NODE_TAGS == {node_type.value for node_type in NodeType}

    def test_tag_lookup(self):
        """Test lookup by tag name."""
        assert NodeType.from_tag("mj-social-element") == NodeType.SOCIAL_ELEMENT
        assert NodeType.from_tag("mj-carousel") is None
        assert NodeType.TEXT.tag == "mj-text"

    def test_variant_groups_are_disjoint(self):
        """Test container, content and self-closing groups partition the variants."""
        assert not CONTAINER_NODE_TYPES & CONTENT_NODE_TYPES
        assert not CONTAINER_NODE_TYPES & SELF_CLOSING_NODE_TYPES
        assert not CONTENT_NODE_TYPES & SELF_CLOSING_NODE_TYPES
        assert CONTAINER_NODE_TYPES | CONTENT_NODE_TYPES | SELF_CLOSING_NODE_TYPES == set(NodeType)


class TestLegality:
    """Test the parent/child legality table."""

    @pytest.mark.parametrize("parent,child", [
        (NodeType.BODY, NodeType.SECTION),
        (NodeType.BODY, NodeType.WRAPPER),
        (NodeType.BODY, NodeType.HERO),
        (NodeType.WRAPPER, NodeType.SECTION),
        (NodeType.SECTION, NodeType.COLUMN),
        (NodeType.COLUMN, NodeType.TEXT),
        (NodeType.COLUMN, NodeType.SOCIAL),
        (NodeType.HERO, NodeType.BUTTON),
        (NodeType.SOCIAL, NodeType.SOCIAL_ELEMENT),
    ])
    def test_allowed(self, parent, child):
        """Test legal pairings."""
        assert is_allowed_child(parent, child)

    @pytest.mark.parametrize("parent,child", [
        (NodeType.BODY, NodeType.COLUMN),
        (NodeType.BODY, NodeType.TEXT),
        (NodeType.SECTION, NodeType.TEXT),
        (NodeType.COLUMN, NodeType.SECTION),
        (NodeType.COLUMN, NodeType.COLUMN),
        (NodeType.HERO, NodeType.SOCIAL),
        (NodeType.WRAPPER, NodeType.WRAPPER),
        (NodeType.TEXT, NodeType.TEXT),
        (NodeType.IMAGE, NodeType.TEXT),
    ])
    def test_forbidden(self, parent, child):
        """Test illegal pairings."""
        assert not is_allowed_child(parent, child)

    def test_leaves_have_no_children(self):
        """Test content and self-closing variants accept nothing."""
        for node_type in CONTENT_NODE_TYPES | SELF_CLOSING_NODE_TYPES:
            assert ALLOWED_CHILDREN[node_type] == frozenset()

    def test_check_child_names_pair(self):
        """Test violations name the parent and child variants."""
        violation = check_child(create_section(), create_text())

        assert violation.parent_type == NodeType.SECTION
        assert violation.child_type == NodeType.TEXT
        assert "mj-text" in str(violation) and "mj-section" in str(violation)

    def test_check_child_column_capacity(self):
        """Test a fifth column is a violation."""
        section = create_section([create_column() for _ in range(MAX_COLUMNS)])

        violation = check_child(section, create_column())

        assert violation is not None
        assert "4 columns" in violation.reason

    def test_check_child_legal(self):
        """Test a legal pairing returns None."""
        assert check_child(create_column(), create_text()) is None


class TestNode:
    """Test node construction and conversion."""

    def test_empty_id_rejected(self):
        """Test a node needs an identifier."""
        with pytest.raises(ValueError):
            Node(id="", type=NodeType.TEXT)

    def test_type_must_be_enum(self):
        """Test a raw tag string is not accepted as type."""
        with pytest.raises(TypeError):
            Node(id="a", type="mj-text")

    def test_to_dict_camel_case(self):
        """Test JSON shape uses camelCase and omits absent optionals."""
        node = Node(id="t", type=NodeType.TEXT, attributes={"color": "red"}, html_content="<p>x</p>")

        assert node.to_dict() == {
            "id": "t",
            "type": "mj-text",
            "attributes": {"color": "red"},
            "children": [],
            "htmlContent": "<p>x</p>",
        }

    def test_identity_equality(self):
        """Test nodes compare by identity rather than structure."""
        a = Node(id="same", type=NodeType.SPACER)
        b = Node(id="same", type=NodeType.SPACER)

        assert a != b
        assert a == a


class TestConditionalRule:
    """Test conditional rules."""

    def test_round_trip_dict(self):
        """Test conversion to and from plain data."""
        rule = ConditionalRule("plan", ConditionOperator.EQUALS, "pro")

        assert ConditionalRule.from_dict(rule.to_dict()) == rule

    def test_operator_coerced_from_string(self):
        """Test a string operator is converted to the enum."""
        assert ConditionalRule("plan", "exists").operator == ConditionOperator.EXISTS

    def test_empty_variable_rejected(self):
        """Test a rule needs a variable."""
        with pytest.raises(ValueError):
            ConditionalRule("", ConditionOperator.EXISTS)


class TestDocument:
    """Test documents."""

    def test_only_version_one(self):
        """Test other versions are refused."""
        with pytest.raises(ValueError):
            Document(body=Node(id="b", type=NodeType.BODY), version=2)

    def test_snapshot_is_independent(self):
        """Test a snapshot shares no mutable state with its source."""
        document = create_default_document()
        copy = document.snapshot()

        copy.body.children[0].attributes["padding"] = "0"
        copy.head_attributes.preview_text = "changed"

        assert document.body.children[0].attributes["padding"] == "20px 0"
        assert document.head_attributes.preview_text == ""
        assert copy.body.id == document.body.id

    def test_to_dict(self):
        """Test the document JSON shape."""
        data = create_default_document().to_dict()

        assert data["version"] == 1
        assert data["headAttributes"] == {"defaultStyles": {}, "fonts": [], "previewText": ""}
        assert data["body"]["type"] == "mj-body"
