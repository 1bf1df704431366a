"""Block library: named factories the editor inserts into a document.

Layout and composite blocks produce body children: a section, a hero, or a
wrapper when the design needs several sections. Content and variable blocks
produce leaves for a column, except the hero which goes directly under the
body. Every factory call returns a new subtree with fresh identifiers.

Variable blocks are not part of the static catalogue. They are generated
from the merge variables a template declares, one text block per variable.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Iterable, List, Optional, Sequence

from email_document_core.model.factory import (
    DEFAULT_PRIMARY_COLOR,
    create_button,
    create_column,
    create_column_layout,
    create_columns_section,
    create_divider,
    create_hero,
    create_image,
    create_section,
    create_social,
    create_social_element,
    create_spacer,
    create_text,
    create_wrapper,
)
from email_document_core.model.types import Node

VARIABLE_BLOCK_PREFIX = "variable-"

_VARIABLE_NAME = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_.]*$")

_PLACEHOLDER = "https://via.placeholder.com"
_THIRD = {"width": "33.33%"}


class BlockCategory(Enum):
    LAYOUT = "layout"
    CONTENT = "content"
    COMPOSITE = "composite"
    VARIABLE = "variable"


@dataclass(frozen=True)
class BlockDefinition:
    """A library entry: identity, display label and subtree factory."""

    id: str
    label: str
    category: BlockCategory
    factory: Callable[[], Node]

    def create(self) -> Node:
        return self.factory()


def _placeholder(size: str, colors: str, text: str) -> str:
    return f"{_PLACEHOLDER}/{size}/{colors}?text={text}"


def _primary_button(label: str, attributes: Optional[Dict[str, str]] = None) -> Node:
    merged = {"background-color": DEFAULT_PRIMARY_COLOR, "color": "#ffffff",
              "font-size": "14px", "border-radius": "6px"}
    merged.update(attributes or {})
    return create_button(label, merged)


def _social_links() -> Node:
    return create_social([
        create_social_element("facebook", "https://facebook.com/"),
        create_social_element("twitter", "https://twitter.com/"),
        create_social_element("instagram", "https://instagram.com/"),
        create_social_element("linkedin", "https://linkedin.com/"),
    ])


def _hero_banner() -> Node:
    return create_hero([
        create_text(
            '<h1 style="margin: 0; font-size: 28px;">Your catchy headline</h1>',
            {"align": "center", "color": "#ffffff", "font-size": "28px", "padding": "0 0 15px 0"},
        ),
        create_text(
            '<p style="margin: 0;">A subtitle with an engaging description.</p>',
            {"align": "center", "color": "#cccccc", "font-size": "16px",
             "padding": "0 40px 25px 40px"},
        ),
        create_button("Discover", {
            "background-color": DEFAULT_PRIMARY_COLOR,
            "font-size": "16px",
            "border-radius": "6px",
            "inner-padding": "14px 30px",
        }),
    ])


# -- composite blocks --------------------------------------------------------


def _header() -> Node:
    return create_section(
        [create_column([
            create_image({
                "src": _placeholder("150x50", "01A8AB/ffffff", "LOGO"),
                "alt": "Logo",
                "width": "150px",
                "align": "center",
                "padding": "0",
            }),
        ])],
        {"background-color": "#ffffff", "padding": "20px 0"},
    )


def _header_nav() -> Node:
    link = '<a href="#" style="color: #555555; text-decoration: none; margin: 0 10px;">{}</a>'
    return create_section(
        [
            create_column([create_image({
                "src": _placeholder("120x40", "01A8AB/ffffff", "LOGO"),
                "alt": "Logo",
                "width": "120px",
                "align": "left",
                "padding": "0",
            })], {"width": "30%"}),
            create_column([create_text(
                "".join(link.format(label) for label in ("Home", "Products", "Contact")),
                {"align": "right", "font-size": "14px", "color": "#555555",
                 "padding": "10px 0 0 0"},
            )], {"width": "70%"}),
        ],
        {"background-color": "#ffffff", "padding": "15px 20px"},
    )


def _hero() -> Node:
    hero = _hero_banner()
    hero.attributes.update({
        "background-height": "400px",
        "background-width": "600px",
        "background-url": _placeholder("600x400", "1a1a2e/ffffff", "+"),
        "padding": "60px 20px",
    })
    return hero


def _hero_gradient() -> Node:
    return create_section(
        [create_column([
            create_text(
                '<h1 style="margin: 0;">Special offer</h1>',
                {"align": "center", "font-size": "32px", "color": "#ffffff",
                 "font-weight": "bold", "padding": "0 0 10px 0"},
            ),
            create_text(
                '<p style="margin: 0;">Take 30% off the whole collection. Limited time only.</p>',
                {"align": "center", "font-size": "18px", "color": "rgba(255,255,255,0.85)",
                 "padding": "0 30px 25px 30px"},
            ),
            create_button("Grab the deal", {
                "background-color": "#ffffff",
                "color": DEFAULT_PRIMARY_COLOR,
                "font-size": "16px",
                "border-radius": "6px",
                "inner-padding": "14px 30px",
                "font-weight": "bold",
            }),
        ])],
        {"background-color": DEFAULT_PRIMARY_COLOR, "padding": "50px 20px"},
    )


def _media_column(width: str) -> Node:
    return create_column([create_image({
        "src": _placeholder("300x200", "e5e7eb/6b7280", "Image"),
        "alt": "Image",
        "border-radius": "8px",
        "padding": "10px",
    })], {"width": width})


def _copy_column(button_label: str) -> Node:
    return create_column([
        create_text(
            '<h3 style="margin: 0;">Section title</h3>',
            {"font-size": "20px", "font-weight": "bold", "padding": "10px 15px 5px 15px"},
        ),
        create_text(
            '<p style="margin: 0;">Describe your product or service here. Keep it short and '
            "engaging to hold the reader's attention.</p>",
            {"color": "#666666", "line-height": "1.6", "padding": "5px 15px 10px 15px"},
        ),
        _primary_button(button_label, {
            "align": "left", "padding": "5px 15px", "inner-padding": "10px 24px",
        }),
    ], {"width": "55%"})


def _image_with_text() -> Node:
    return create_section(
        [_media_column("45%"), _copy_column("Learn more")],
        {"background-color": "#ffffff", "padding": "20px 0"},
    )


def _text_with_image() -> Node:
    return create_section(
        [_copy_column("Discover"), _media_column("45%")],
        {"background-color": "#ffffff", "padding": "20px 0"},
    )


def _call_to_action() -> Node:
    return create_section(
        [create_column([
            create_text(
                '<h2 style="margin: 0;">Ready to get started?</h2>',
                {"align": "center", "font-size": "22px", "font-weight": "bold",
                 "padding": "0 0 10px 0"},
            ),
            create_text(
                '<p style="margin: 0;">Join thousands of happy customers and change the way '
                "you communicate.</p>",
                {"align": "center", "font-size": "15px", "color": "#666666",
                 "padding": "0 40px 20px 40px"},
            ),
            _primary_button("Start now", {
                "font-size": "16px", "inner-padding": "14px 40px", "font-weight": "bold",
            }),
        ])],
        {"background-color": "#f8f9fa", "padding": "40px 20px"},
    )


def _image_grid() -> Node:
    def row(first: int, padding: str) -> Node:
        return create_section(
            [
                create_column([create_image({
                    "src": _placeholder("280x200", "e5e7eb/6b7280", f"Image+{n}"),
                    "alt": f"Image {n}",
                    "border-radius": "8px",
                    "padding": "5px",
                })], {"width": "50%"})
                for n in (first, first + 1)
            ],
            {"background-color": "#ffffff", "padding": padding},
        )

    return create_wrapper([row(1, "10px 0"), row(3, "0 0 10px 0")])


def _features() -> Node:
    features = [
        ("%E2%9C%93", "Fast", "Send your campaigns in a few clicks."),
        ("%E2%98%85", "Reliable", "Outstanding deliverability."),
        ("%E2%99%A5", "Simple", "An intuitive, easy to use interface."),
    ]
    return create_section(
        [
            create_column([
                create_image({
                    "src": _placeholder("64x64", "01A8AB/ffffff", icon),
                    "alt": "Feature",
                    "width": "50px",
                    "align": "center",
                    "padding": "0 0 10px 0",
                }),
                create_text(f'<p style="margin: 0; font-weight: bold;">{title}</p>',
                            {"align": "center", "font-size": "16px", "padding": "0 5px 5px 5px"}),
                create_text(f'<p style="margin: 0;">{description}</p>',
                            {"align": "center", "font-size": "13px", "color": "#666666",
                             "padding": "0 10px"}),
            ], _THIRD)
            for icon, title, description in features
        ],
        {"background-color": "#ffffff", "padding": "30px 10px"},
    )


def _testimonial() -> Node:
    return create_section(
        [create_column([
            create_text(
                '<p style="margin: 0; font-style: italic;">"This service completely changed how we '
                'talk to our customers. The results went beyond our expectations."</p>',
                {"align": "center", "font-size": "18px", "line-height": "1.6",
                 "padding": "0 30px 15px 30px"},
            ),
            create_image({
                "src": _placeholder("60x60", "cccccc/666666", "JD"),
                "alt": "Avatar",
                "width": "50px",
                "align": "center",
                "border-radius": "25px",
                "padding": "0 0 8px 0",
            }),
            create_text('<p style="margin: 0; font-weight: bold;">John Doe</p>',
                        {"align": "center", "padding": "0"}),
            create_text('<p style="margin: 0;">Marketing Director, Acme Inc.</p>',
                        {"align": "center", "font-size": "12px", "color": "#999999",
                         "padding": "0"}),
        ])],
        {"background-color": "#f8f9fa", "padding": "30px 20px"},
    )


def _pricing_column(plan: str, price: str, perks: Sequence[str], featured: bool) -> Node:
    children = []
    if featured:
        children.append(create_text(
            '<p style="margin: 0; font-size: 10px; text-transform: uppercase; '
            "letter-spacing: 1px; font-weight: bold; color: #ffffff; background: #01A8AB; "
            'padding: 6px; text-align: center;">Popular</p>',
            {"padding": "0", "font-size": "10px"},
        ))
    children.extend([
        create_text(f'<p style="margin: 0; font-weight: bold;">{plan}</p>',
                    {"align": "center", "font-size": "18px",
                     "padding": "15px 10px 5px 10px" if featured else "20px 10px 5px 10px"}),
        create_text(
            f'<p style="margin: 0;">{price}<span style="font-size: 16px; color: #999;">'
            "/month</span></p>",
            {"align": "center", "font-size": "36px", "color": DEFAULT_PRIMARY_COLOR,
             "font-weight": "bold", "padding": "5px 10px"},
        ),
        create_text(f'<p style="margin: 0; line-height: 1.8;">{"<br/>".join(perks)}</p>',
                    {"align": "center", "font-size": "13px", "color": "#666666",
                     "padding": "10px 20px"}),
        _primary_button("Choose", {"inner-padding": "12px 30px", "padding": "10px 0 20px 0"}),
    ])
    attributes = {"width": "50%", "border": "1px solid #e5e7eb", "border-radius": "8px"}
    if featured:
        attributes.update({"border": f"2px solid {DEFAULT_PRIMARY_COLOR}",
                           "background-color": "#f0fdfd"})
    return create_column(children, attributes)


def _pricing() -> Node:
    return create_section(
        [
            _pricing_column("Starter", "$19",
                            ["1,000 emails/month", "Email support", "Basic templates"], False),
            _pricing_column("Business", "$49",
                            ["10,000 emails/month", "Priority support", "Premium templates"], True),
        ],
        {"background-color": "#ffffff", "padding": "20px 10px"},
    )


def _coupon() -> Node:
    return create_section(
        [create_column([
            create_text(
                '<p style="margin: 0; text-transform: uppercase; letter-spacing: 2px; '
                'font-weight: bold;">Exclusive offer</p>',
                {"align": "center", "font-size": "12px", "color": "#b45309",
                 "padding": "0 0 8px 0"},
            ),
            create_text('<p style="margin: 0; font-weight: bold;">30% off with code</p>',
                        {"align": "center", "font-size": "24px", "padding": "0 0 5px 0"}),
            create_text(
                '<p style="margin: 0; font-weight: bold; letter-spacing: 4px;">SAVE30</p>',
                {"align": "center", "font-size": "28px", "color": DEFAULT_PRIMARY_COLOR,
                 "padding": "5px 0 15px 0"},
            ),
            create_button("Use the code", {
                "background-color": "#f59e0b",
                "border-radius": "6px",
                "inner-padding": "12px 30px",
                "font-weight": "bold",
            }),
        ])],
        {"background-color": "#fffbeb", "border": "2px dashed #f59e0b",
         "border-radius": "8px", "padding": "25px 20px"},
    )


def _video() -> Node:
    return create_section(
        [create_column([
            create_image({
                "src": _placeholder("600x340", "1a1a2e/ffffff", "%E2%96%B6+Watch+the+video"),
                "alt": "Video",
                "href": "https://youtube.com",
                "border-radius": "8px",
                "padding": "10px 20px",
            }),
            create_text('<p style="margin: 0;">Click to watch the video</p>',
                        {"align": "center", "font-size": "13px", "color": "#999999",
                         "padding": "5px 0 0 0"}),
        ])],
        {"background-color": "#ffffff", "padding": "20px 0"},
    )


def _follow_us() -> Node:
    social = _social_links()
    social.attributes.update({"font-size": "12px", "icon-size": "30px", "padding": "0"})
    return create_section(
        [create_column([
            create_text('<p style="margin: 0; font-weight: bold;">Follow us</p>',
                        {"align": "center", "font-size": "16px", "padding": "0 0 15px 0"}),
            social,
        ])],
        {"background-color": "#ffffff", "padding": "20px 0"},
    )


def _footer() -> Node:
    link = '<a href="#" style="color: #01A8AB; text-decoration: underline;">{}</a>'
    links = " &nbsp;|&nbsp; ".join(
        link.format(label) for label in ("Unsubscribe", "Preferences", "Privacy policy")
    )
    return create_section(
        [create_column([
            create_social(
                [
                    create_social_element(name, f"https://{name}.com/",
                                          {"background-color": "#333333"})
                    for name in ("facebook", "twitter", "instagram")
                ],
                {"font-size": "11px", "padding": "0 0 15px 0", "icon-padding": "0 8px"},
            ),
            create_text(
                '<p style="margin: 0;">You are receiving this email because you signed up '
                "on our platform.</p>",
                {"align": "center", "font-size": "12px", "color": "#999999",
                 "line-height": "1.6", "padding": "0 20px"},
            ),
            create_text(f'<p style="margin: 0;">{links}</p>',
                        {"align": "center", "font-size": "12px", "padding": "10px 0 0 0"}),
            create_text(
                '<p style="margin: 0;">&copy; 2026 Your Company. All rights reserved.</p>',
                {"align": "center", "font-size": "11px", "color": "#666666",
                 "padding": "15px 0 0 0"},
            ),
        ])],
        {"background-color": "#333333", "padding": "30px 20px"},
    )


def _footer_minimal() -> Node:
    return create_section(
        [create_column([create_text(
            '<p style="margin: 0;">You are receiving this email from Your Company.<br/>'
            '<a href="#" style="color: #01A8AB;">Unsubscribe</a></p>',
            {"align": "center", "font-size": "12px", "color": "#999999", "line-height": "1.6"},
        )])],
        {"background-color": "#f8f9fa", "padding": "20px"},
    )


def _separator() -> Node:
    return create_section(
        [create_column([create_divider({"padding": "15px 80px"})])],
        {"padding": "10px 0"},
    )


def _product_column(price_html: str, price_attributes: Dict[str, str]) -> Node:
    return create_column([
        create_image({
            "src": _placeholder("280x280", "f3f4f6/6b7280", "Product"),
            "alt": "Product",
            "border-radius": "8px",
            "padding": "0 0 10px 0",
        }),
        create_text('<p style="margin: 0; font-weight: bold;">Product name</p>',
                    {"align": "center", "font-size": "16px", "padding": "0 10px 4px 10px"}),
        create_text(price_html, dict(
            {"align": "center", "padding": "0 10px 12px 10px"}, **price_attributes
        )),
        _primary_button("Buy", {"inner-padding": "10px 28px", "padding": "0 10px 10px 10px"}),
    ], {"width": "33.33%", "border": "1px solid #e5e7eb", "border-radius": "8px"})


def _product_cards() -> Node:
    regular = ('<p style="margin: 0;">$49.99</p>', {"font-weight": "bold"})
    return create_section(
        [
            _product_column(
                '<p style="margin: 0; text-decoration: line-through; display: inline;">$49.99</p>'
                ' <span style="color: #dc2626; font-weight: bold;">$29.99</span>',
                {"color": "#999999"},
            ),
            _product_column(*regular),
            _product_column(*regular),
        ],
        {"background-color": "#ffffff", "padding": "20px 10px"},
    )


def _notification() -> Node:
    return create_section(
        [
            create_column([create_image({
                "src": _placeholder("40x40", "01A8AB/ffffff", "%E2%84%B9"),
                "alt": "Info",
                "width": "40px",
                "align": "center",
                "padding": "0",
            })], {"width": "15%", "vertical-align": "middle"}),
            create_column([
                create_text('<p style="margin: 0; font-weight: bold;">Important information</p>',
                            {"font-size": "15px", "color": "#1e40af", "padding": "0 10px 4px 0"}),
                create_text(
                    '<p style="margin: 0;">Use this notice to tell your readers about a change '
                    "or an update.</p>",
                    {"font-size": "13px", "color": "#1e3a5f", "padding": "0 10px 0 0"},
                ),
            ], {"width": "85%", "vertical-align": "middle"}),
        ],
        {"background-color": "#eff6ff", "padding": "20px", "border": "1px solid #bfdbfe",
         "border-radius": "8px"},
    )


def _stats() -> Node:
    figures = [("12,500", "Users"), ("98.5%", "Satisfaction"), ("1M+", "Messages")]
    return create_section(
        [
            create_column([
                create_text(f'<p style="margin: 0; font-weight: bold;">{figure}</p>',
                            {"align": "center", "font-size": "32px",
                             "color": DEFAULT_PRIMARY_COLOR, "padding": "0 0 4px 0"}),
                create_text(
                    '<p style="margin: 0; text-transform: uppercase; letter-spacing: 1px;">'
                    f"{caption}</p>",
                    {"align": "center", "font-size": "11px", "color": "#999999", "padding": "0"},
                ),
            ], _THIRD)
            for figure, caption in figures
        ],
        {"background-color": "#ffffff", "padding": "30px 10px"},
    )


def _announcement() -> Node:
    return create_section(
        [create_column([create_text(
            '<p style="margin: 0;">🎉 <strong>New!</strong> Discover our latest feature. '
            '<a href="#" style="color: #ffffff; text-decoration: underline;">Learn more →</a></p>',
            {"align": "center", "color": "#ffffff", "padding": "0"},
        )])],
        {"background-color": DEFAULT_PRIMARY_COLOR, "padding": "12px 20px"},
    )


def _timeline() -> Node:
    badge = (
        '<p style="margin: 0; font-weight: bold; text-align: center;">'
        '<span style="display: inline-block; background: #01A8AB; color: #fff; width: 28px; '
        'height: 28px; line-height: 28px; border-radius: 50%; text-align: center;">{}</span></p>'
    )
    steps = [
        ("Sign up", "Create your account in 2 minutes."),
        ("Set up", "Configure your preferences."),
        ("Send", "Launch your first campaign."),
    ]
    return create_section(
        [
            create_column([
                create_text(badge.format(number), {"align": "center", "padding": "0 0 8px 0"}),
                create_text(f'<p style="margin: 0; font-weight: bold;">{title}</p>',
                            {"align": "center", "padding": "0 5px 4px 5px"}),
                create_text(f'<p style="margin: 0;">{description}</p>',
                            {"align": "center", "font-size": "12px", "color": "#666666",
                             "padding": "0 5px"}),
            ], _THIRD)
            for number, (title, description) in enumerate(steps, start=1)
        ],
        {"background-color": "#ffffff", "padding": "30px 10px"},
    )


def _order_summary() -> Node:
    white = {"background-color": "#ffffff"}

    def amount(html: str, attributes: Dict[str, str]) -> Node:
        return create_text(html, dict({"align": "right", "padding": "0"}, **attributes))

    title = create_section(
        [create_column([create_text(
            '<h3 style="margin: 0;">Order summary</h3>',
            {"font-size": "18px", "font-weight": "bold", "padding": "0 0 15px 0"},
        )])],
        dict(white, padding="25px 25px 5px 25px"),
    )
    item = create_section(
        [
            create_column([create_image({
                "src": _placeholder("80x80", "f3f4f6/6b7280", "A"),
                "alt": "Product",
                "width": "60px",
                "padding": "0",
            })], {"width": "15%", "vertical-align": "middle"}),
            create_column([
                create_text('<p style="margin: 0; font-weight: bold;">Premium item</p>',
                            {"padding": "0 0 2px 0"}),
                create_text('<p style="margin: 0;">Quantity: 1</p>',
                            {"font-size": "12px", "color": "#999999", "padding": "0"}),
            ], {"width": "60%", "vertical-align": "middle"}),
            create_column(
                [amount('<p style="margin: 0; font-weight: bold; text-align: right;">$49.99</p>',
                        {})],
                {"width": "25%", "vertical-align": "middle"},
            ),
        ],
        dict(white, padding="10px 25px"),
    )
    rule = create_section(
        [create_column([create_divider({"padding": "10px 0"})])],
        dict(white, padding="0 25px"),
    )
    totals = create_section(
        [
            create_column([
                create_text('<p style="margin: 0;">Subtotal</p>',
                            {"font-size": "13px", "color": "#666666", "padding": "0"}),
                create_text('<p style="margin: 0;">Shipping</p>',
                            {"font-size": "13px", "color": "#666666", "padding": "4px 0 0 0"}),
                create_text('<p style="margin: 0; font-weight: bold; font-size: 16px;">Total</p>',
                            {"font-size": "16px", "padding": "10px 0 0 0"}),
            ], {"width": "60%"}),
            create_column([
                amount('<p style="margin: 0; text-align: right;">$49.99</p>',
                       {"font-size": "13px", "color": "#666666"}),
                amount('<p style="margin: 0; text-align: right;">Free</p>',
                       {"font-size": "13px", "color": "#16a34a", "padding": "4px 0 0 0"}),
                amount('<p style="margin: 0; text-align: right; font-weight: bold; '
                       'font-size: 16px;">$49.99</p>',
                       {"font-size": "16px", "padding": "10px 0 0 0"}),
            ], {"width": "40%"}),
        ],
        dict(white, padding="5px 25px 25px 25px"),
    )
    return create_wrapper([title, item, rule, totals])


def _faq() -> Node:
    questions = [
        ("How does it work?",
         "Sign up, configure your account and start sending messages within minutes."),
        ("Can I cancel at any time?",
         "Yes, you can cancel your subscription at any time at no extra cost."),
        ("What support do you offer?",
         "Our team is available by email and chat, Monday to Friday, 9am to 6pm."),
    ]
    children = [create_text(
        '<h3 style="margin: 0; text-align: center;">Frequently asked questions</h3>',
        {"align": "center", "font-size": "20px", "font-weight": "bold", "padding": "0 0 20px 0"},
    )]
    for position, (question, answer) in enumerate(questions):
        if position:
            children.append(create_divider({"border-color": "#f3f4f6", "padding": "0 0 15px 0"}))
        last = position == len(questions) - 1
        children.extend([
            create_text(f'<p style="margin: 0; font-weight: bold;">{question}</p>',
                        {"font-size": "15px", "padding": "0 0 4px 0"}),
            create_text(f'<p style="margin: 0;">{answer}</p>',
                        {"font-size": "13px", "color": "#666666", "line-height": "1.6",
                         "padding": "0" if last else "0 0 15px 0"}),
        ])
    return create_section([create_column(children)],
                          {"background-color": "#ffffff", "padding": "30px 25px"})


def _team() -> Node:
    members = [
        ("JD", "John Doe", "CEO &amp; Founder"),
        ("ML", "Mary Lane", "Chief Technology Officer"),
        ("PB", "Peter Brown", "Head of Marketing"),
    ]
    return create_section(
        [
            create_column([
                create_image({
                    "src": _placeholder("100x100", "e5e7eb/6b7280", initials),
                    "alt": "Avatar",
                    "width": "80px",
                    "align": "center",
                    "border-radius": "40px",
                    "padding": "0 0 8px 0",
                }),
                create_text(f'<p style="margin: 0; font-weight: bold;">{name}</p>',
                            {"align": "center", "padding": "0 5px 2px 5px"}),
                create_text(f'<p style="margin: 0;">{role}</p>',
                            {"align": "center", "font-size": "12px",
                             "color": DEFAULT_PRIMARY_COLOR, "padding": "0 5px"}),
            ], _THIRD)
            for initials, name, role in members
        ],
        {"background-color": "#ffffff", "padding": "30px 10px"},
    )


def _countdown() -> Node:
    return create_section(
        [create_column([create_text(
            '<p style="margin: 0; text-transform: uppercase; letter-spacing: 2px;">'
            "Offer ends in</p>",
            {"align": "center", "font-size": "12px", "color": "#dc2626", "padding": "0 0 15px 0"},
        )])],
        {"background-color": "#fef2f2", "padding": "25px 20px 5px 20px"},
    )


def _review() -> Node:
    return create_section(
        [create_column([
            create_text('<p style="margin: 0; font-size: 24px; text-align: center;">⭐⭐⭐⭐⭐</p>',
                        {"align": "center", "padding": "0 0 10px 0"}),
            create_text(
                '<p style="margin: 0; font-style: italic;">"Outstanding service! Setup was '
                'lightning fast and support is very responsive. Highly recommended."</p>',
                {"align": "center", "font-size": "15px", "line-height": "1.6",
                 "padding": "0 30px 15px 30px"},
            ),
            create_divider({"padding": "0 100px 10px 100px"}),
            create_text('<p style="margin: 0; font-weight: bold;">Sophie Martin</p>',
                        {"align": "center", "font-size": "13px", "padding": "0"}),
            create_text('<p style="margin: 0;">Communications Manager</p>',
                        {"align": "center", "font-size": "11px", "color": "#999999",
                         "padding": "0"}),
        ])],
        {"background-color": "#ffffff", "padding": "25px 20px"},
    )


def _app_download() -> Node:
    def store_button(label: str, padding: str) -> Node:
        return create_button(label, {
            "background-color": "#000000",
            "font-size": "13px",
            "border-radius": "6px",
            "inner-padding": "10px 20px",
            "align": "left",
            "padding": padding,
        })

    return create_section(
        [
            create_column([
                create_text('<h3 style="margin: 0;">Download our app</h3>',
                            {"font-size": "20px", "font-weight": "bold",
                             "padding": "10px 15px 5px 15px"}),
                create_text(
                    '<p style="margin: 0;">Stay connected wherever you are. Available on iOS '
                    "and Android.</p>",
                    {"color": "#666666", "padding": "5px 15px 15px 15px"},
                ),
                store_button("App Store", "0 15px 8px 15px"),
                store_button("Google Play", "0 15px 10px 15px"),
            ], {"width": "55%"}),
            create_column([create_image({
                "src": _placeholder("250x300", "f3f4f6/6b7280", "App+Preview"),
                "alt": "Mobile app",
                "padding": "10px",
            })], {"width": "45%"}),
        ],
        {"background-color": "#ffffff", "padding": "20px 0"},
    )


LAYOUT_BLOCKS: List[BlockDefinition] = [
    BlockDefinition("layout-1-col", "1 column", BlockCategory.LAYOUT,
                    lambda: create_columns_section(1)),
    BlockDefinition("layout-2-col", "2 columns", BlockCategory.LAYOUT,
                    lambda: create_columns_section(2)),
    BlockDefinition("layout-3-col", "3 columns", BlockCategory.LAYOUT,
                    lambda: create_columns_section(3)),
    BlockDefinition("layout-4-col", "4 columns", BlockCategory.LAYOUT,
                    lambda: create_columns_section(4)),
    BlockDefinition("layout-sidebar-left", "Sidebar left", BlockCategory.LAYOUT,
                    lambda: create_column_layout(["33%", "67%"])),
    BlockDefinition("layout-sidebar-right", "Sidebar right", BlockCategory.LAYOUT,
                    lambda: create_column_layout(["67%", "33%"])),
]

CONTENT_BLOCKS: List[BlockDefinition] = [
    BlockDefinition("content-text", "Text", BlockCategory.CONTENT, create_text),
    BlockDefinition("content-image", "Image", BlockCategory.CONTENT, create_image),
    BlockDefinition("content-button", "Button", BlockCategory.CONTENT, create_button),
    BlockDefinition("content-divider", "Divider", BlockCategory.CONTENT, create_divider),
    BlockDefinition("content-spacer", "Spacer", BlockCategory.CONTENT, create_spacer),
    BlockDefinition("content-social", "Social links", BlockCategory.CONTENT, _social_links),
    BlockDefinition("content-hero", "Hero", BlockCategory.CONTENT, _hero_banner),
]


def _composite(block_id: str, label: str, factory: Callable[[], Node]) -> BlockDefinition:
    return BlockDefinition(f"composite-{block_id}", label, BlockCategory.COMPOSITE, factory)


COMPOSITE_BLOCKS: List[BlockDefinition] = [
    _composite("header", "Header with logo", _header),
    _composite("header-nav", "Header with navigation", _header_nav),
    _composite("hero", "Hero banner", _hero),
    _composite("hero-gradient", "Colour banner", _hero_gradient),
    _composite("img-text", "Image and text", _image_with_text),
    _composite("text-img", "Text and image", _text_with_image),
    _composite("cta", "Call to action", _call_to_action),
    _composite("image-grid", "Image grid", _image_grid),
    _composite("features", "Features", _features),
    _composite("testimonial", "Testimonial", _testimonial),
    _composite("pricing", "Pricing", _pricing),
    _composite("coupon", "Promo code", _coupon),
    _composite("video", "Video", _video),
    _composite("social", "Follow us", _follow_us),
    _composite("footer", "Footer", _footer),
    _composite("footer-minimal", "Simple footer", _footer_minimal),
    _composite("separator", "Separator", _separator),
    _composite("product-card", "Product cards", _product_cards),
    _composite("notification", "Notification", _notification),
    _composite("stats", "Statistics", _stats),
    _composite("announcement", "Announcement bar", _announcement),
    _composite("timeline", "Steps", _timeline),
    _composite("order-summary", "Order summary", _order_summary),
    _composite("faq", "FAQ", _faq),
    _composite("team", "Team", _team),
    _composite("countdown", "Countdown", _countdown),
    _composite("review", "Customer review", _review),
    _composite("app-download", "Mobile app", _app_download),
]

ALL_BLOCKS: List[BlockDefinition] = LAYOUT_BLOCKS + CONTENT_BLOCKS + COMPOSITE_BLOCKS


def variable_blocks(variables: Iterable[str]) -> List[BlockDefinition]:
    """One text block per merge variable, holding its ``{{name}}`` tag.

    Names that are not valid merge tag identifiers are skipped, and repeated
    names produce a single block.
    """
    blocks: List[BlockDefinition] = []
    seen = set()
    for name in variables:
        name = name.strip()
        if name in seen or not _VARIABLE_NAME.match(name):
            continue
        seen.add(name)
        blocks.append(BlockDefinition(
            f"{VARIABLE_BLOCK_PREFIX}{name}",
            name,
            BlockCategory.VARIABLE,
            lambda tag="{{" + name + "}}": create_text(f"<p>{tag}</p>"),
        ))
    return blocks


def all_blocks(variables: Iterable[str] = ()) -> List[BlockDefinition]:
    """The static catalogue followed by blocks for ``variables``."""
    return ALL_BLOCKS + variable_blocks(variables)


def find_block(block_id: str, variables: Iterable[str] = ()) -> Optional[BlockDefinition]:
    """Look up a block by id, including blocks for ``variables``."""
    for block in all_blocks(variables):
        if block.id == block_id:
            return block
    return None


def blocks_by_category(
    variables: Iterable[str] = (),
) -> Dict[BlockCategory, List[BlockDefinition]]:
    """Blocks grouped by category, in category display order."""
    blocks = all_blocks(variables)
    return {
        category: [block for block in blocks if block.category == category]
        for category in BlockCategory
    }
