"""Starter templates offered when a new email is created."""

from dataclasses import dataclass
from typing import Callable, List, Optional

from email_document_core.blocks.library import find_block
from email_document_core.model.factory import (
    create_body,
    create_button,
    create_column,
    create_default_document,
    create_divider,
    create_hero,
    create_image,
    create_section,
    create_spacer,
    create_text,
    create_wrapper,
)
from email_document_core.model.types import Document, FontDeclaration, HeadAttributes, Node

DEFAULT_FONT = FontDeclaration(
    name="Roboto",
    href="https://fonts.googleapis.com/css?family=Roboto:400,700",
)


@dataclass(frozen=True)
class StarterTemplate:
    id: str
    label: str
    description: str
    factory: Callable[[], Document]

    def create(self) -> Document:
        return self.factory()


def _head(preview_text: str) -> HeadAttributes:
    return HeadAttributes(
        default_styles={
            "mj-all": {"font-family": "Roboto, Helvetica, Arial, sans-serif"},
            "mj-text": {"line-height": "1.6"},
        },
        fonts=[FontDeclaration(DEFAULT_FONT.name, DEFAULT_FONT.href)],
        preview_text=preview_text,
    )


def _block(block_id: str) -> Node:
    return find_block(block_id).create()


def newsletter() -> Document:
    """Logo header, lead article, two teaser columns, footer."""
    lead = create_section([create_column([
        create_text('<h1 style="margin: 0;">This month\'s highlights</h1>',
                    {"font-size": "26px", "color": "#1a1a2e"}),
        create_image({"alt": "Lead story"}),
        create_text("<p>Open with the story your readers care about most.</p>"),
        create_button("Read the story"),
    ])], {"background-color": "#ffffff"})

    teasers = create_section([
        create_column([
            create_image({"src": "https://via.placeholder.com/280x160", "alt": "Teaser"}),
            create_text("<p><strong>Product update</strong></p><p>What shipped this month.</p>"),
        ]),
        create_column([
            create_image({"src": "https://via.placeholder.com/280x160", "alt": "Teaser"}),
            create_text("<p><strong>From the blog</strong></p><p>Ideas worth a read.</p>"),
        ]),
    ], {"background-color": "#ffffff"})

    return Document(
        body=create_body([
            _block("composite-header"),
            lead,
            create_section([create_column([create_divider()])], {"background-color": "#ffffff"}),
            teasers,
            _block("composite-footer"),
        ]),
        head_attributes=_head("The latest news, in one email"),
    )


def welcome() -> Document:
    """Hero greeting followed by a call to action."""
    hero = create_hero([
        create_text('<h1 style="margin: 0;">Welcome aboard</h1>',
                    {"align": "center", "color": "#ffffff", "font-size": "30px"}),
        create_text("<p>We are glad you are here.</p>",
                    {"align": "center", "color": "#cccccc", "font-size": "16px"}),
    ])

    next_steps = create_section([create_column([
        create_text("<p>Here is how to get started in three quick steps.</p>"),
        create_text("<ol><li>Complete your profile</li><li>Invite your team</li>"
                    "<li>Send your first campaign</li></ol>"),
        create_spacer(),
        create_button("Get started", {"align": "center"}),
    ])], {"background-color": "#ffffff"})

    return Document(
        body=create_body([hero, next_steps, _block("composite-footer")]),
        head_attributes=_head("Thanks for signing up"),
    )


def promotion() -> Document:
    """Offer banner inside a wrapper plus a three-product grid."""
    banner = create_section([create_column([
        create_text('<h1 style="margin: 0;">30% off everything</h1>',
                    {"align": "center", "color": "#ffffff", "font-size": "32px"}),
        create_text("<p>This weekend only.</p>",
                    {"align": "center", "color": "#ffffff", "font-size": "18px"}),
        create_button("Shop the sale", {
            "background-color": "#ffffff",
            "color": "#01A8AB",
            "font-weight": "bold",
        }),
    ])], {"background-color": "#01A8AB", "padding": "50px 20px"})

    products = create_section([
        create_column([
            create_image({"src": "https://via.placeholder.com/180x180", "alt": name}),
            create_text(f"<p>{name}</p>", {"align": "center"}),
            create_button("Buy now", {"font-size": "12px"}),
        ])
        for name in ("Product one", "Product two", "Product three")
    ], {"background-color": "#ffffff"})

    return Document(
        body=create_body([
            create_wrapper([banner, products], {"padding": "20px 0"}),
            _block("composite-footer"),
        ]),
        head_attributes=_head("Our biggest sale of the season"),
    )


STARTER_TEMPLATES: List[StarterTemplate] = [
    StarterTemplate("blank", "Blank", "One empty section", create_default_document),
    StarterTemplate("newsletter", "Newsletter", "Header, articles and footer", newsletter),
    StarterTemplate("welcome", "Welcome", "Greeting for new subscribers", welcome),
    StarterTemplate("promotion", "Promotion", "Sale banner and product grid", promotion),
]


def find_starter(starter_id: str) -> Optional[StarterTemplate]:
    for starter in STARTER_TEMPLATES:
        if starter.id == starter_id:
            return starter
    return None
