"""Export of documents for specific email service providers.

Templates use generic ``{{variable}}`` merge tags. An ``EspPreset`` maps them
onto a provider's own syntax (``*|FNAME|*`` for Mailchimp,
``{{ contact.FIRSTNAME }}`` for Brevo) and may post-process the compiled HTML
to satisfy provider rules. Editor identification classes never reach the
exported markup.
"""

import re
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

from email_document_core.model.conditions import NodeFilter
from email_document_core.model.types import Document
from email_document_core.serializer.compiler import Compiler, compile_markup
from email_document_core.serializer.writer import document_to_markup, strip_node_class_tokens
from email_document_core.shared import EmailDocumentError, SerializerConfig, get_logger

MERGE_TAG = re.compile(r"\{\{\s*([a-zA-Z_][a-zA-Z0-9_.]*)\s*\}\}")

_HTML_CLASS = re.compile(r'(\s*)class="([^"]*)"')
_BRACED_URL = re.compile(r"(?<!\{)\{\{(https?://[^}]+)\}\}(?!\})")

MAILCHIMP_UNSUBSCRIBE_FOOTER = (
    '<div style="text-align:center;font-size:11px;color:#999;padding:20px 0;">'
    '<a href="*|UNSUB|*" style="color:#999;">Unsubscribe</a>'
    "</div>"
)

logger = get_logger(__name__, component="esp_export")


class UnknownPresetError(EmailDocumentError):
    """Raised when an export names a preset that is not registered."""


@dataclass(frozen=True)
class EspPreset:
    """Merge tag syntax and HTML rules of one email service provider.

    Attributes:
        id: Registry key
        name: Display name
        merge_tags: Provider tags for well-known variables
        fallback: Formats any variable missing from ``merge_tags``
        post_process: Optional transformation of the compiled HTML
    """

    id: str
    name: str
    fallback: Callable[[str], str]
    merge_tags: Mapping[str, str] = field(default_factory=dict)
    post_process: Optional[Callable[[str], str]] = None

    def transform_merge_tag(self, variable: str) -> str:
        return self.merge_tags.get(variable) or self.fallback(variable)


def _handlebars(variable: str) -> str:
    return "{{" + variable + "}}"


def _mailchimp_post_process(html: str) -> str:
    # Mailchimp rejects campaigns without an unsubscribe link
    if "*|UNSUB|*" in html or "*|LIST:UNSUBSCRIBE|*" in html:
        return html
    return html.replace("</body>", MAILCHIMP_UNSUBSCRIBE_FOOTER + "</body>", 1)


def _sendgrid_post_process(html: str) -> str:
    # URLs need triple braces so SendGrid leaves them unescaped
    return _BRACED_URL.sub(r"{{{\1}}}", html)


MAILCHIMP_PRESET = EspPreset(
    id="mailchimp",
    name="Mailchimp",
    fallback=lambda variable: f"*|{variable.upper()}|*",
    merge_tags={
        "first_name": "*|FNAME|*",
        "last_name": "*|LNAME|*",
        "email": "*|EMAIL|*",
        "company": "*|COMPANY|*",
        "phone": "*|PHONE|*",
        "address": "*|ADDRESS|*",
        "city": "*|CITY|*",
        "state": "*|STATE|*",
        "zip": "*|ZIP|*",
        "country": "*|COUNTRY|*",
        "unsubscribe_url": "*|UNSUB|*",
        "update_profile_url": "*|UPDATE_PROFILE|*",
        "browser_url": "*|ARCHIVE|*",
        "current_year": "*|CURRENT_YEAR|*",
        "list_name": "*|LIST:NAME|*",
    },
    post_process=_mailchimp_post_process,
)

SENDGRID_PRESET = EspPreset(
    id="sendgrid",
    name="SendGrid",
    fallback=_handlebars,
    merge_tags={
        "first_name": "{{first_name}}",
        "last_name": "{{last_name}}",
        "email": "{{email}}",
        "company": "{{company}}",
        "unsubscribe_url": "{{{unsubscribe}}}",
        "browser_url": "{{{weblink}}}",
        "sender_name": "{{sender_name}}",
        "sender_city": "{{sender_city}}",
        "sender_state": "{{sender_state}}",
        "sender_country": "{{sender_country}}",
    },
    post_process=_sendgrid_post_process,
)

BREVO_PRESET = EspPreset(
    id="brevo",
    name="Brevo (Sendinblue)",
    fallback=lambda variable: f"{{{{ contact.{variable.upper()} }}}}",
    merge_tags={
        "first_name": "{{ contact.FIRSTNAME }}",
        "last_name": "{{ contact.LASTNAME }}",
        "email": "{{ contact.EMAIL }}",
        "company": "{{ contact.COMPANY }}",
        "phone": "{{ contact.SMS }}",
        "unsubscribe_url": "{{ unsubscribe }}",
        "browser_url": "{{ mirror }}",
        "current_date": "{{ date_now }}",
    },
)

AWS_SES_PRESET = EspPreset(
    id="aws-ses",
    name="Amazon SES",
    fallback=_handlebars,
    merge_tags={
        "first_name": "{{firstName}}",
        "last_name": "{{lastName}}",
        "email": "{{email}}",
        "company": "{{company}}",
        "unsubscribe_url": "{{unsubscribeUrl}}",
    },
)

POSTMARK_PRESET = EspPreset(
    id="postmark",
    name="Postmark",
    fallback=_handlebars,
    merge_tags={
        "first_name": "{{first_name}}",
        "last_name": "{{last_name}}",
        "email": "{{email}}",
        "company": "{{company_name}}",
        "unsubscribe_url": "{{{unsubscribe_url}}}",
    },
)

RESEND_PRESET = EspPreset(id="resend", name="Resend", fallback=_handlebars)

ESP_PRESETS: Dict[str, EspPreset] = {
    preset.id: preset
    for preset in (
        MAILCHIMP_PRESET,
        SENDGRID_PRESET,
        BREVO_PRESET,
        AWS_SES_PRESET,
        POSTMARK_PRESET,
        RESEND_PRESET,
    )
}


@dataclass
class EspExportResult:
    """Provider-ready HTML plus the markup it was compiled from."""

    html: str
    markup: str
    preset_id: str
    errors: List[Any] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.errors


def find_preset(preset_id: str) -> Optional[EspPreset]:
    return ESP_PRESETS.get(preset_id)


def transform_merge_tags(
    content: str,
    preset: EspPreset,
    custom_tags: Optional[Mapping[str, str]] = None,
) -> str:
    """Rewrite ``{{variable}}`` tags, custom mappings taking precedence."""
    custom_tags = custom_tags or {}

    def substitute(match: "re.Match[str]") -> str:
        variable = match.group(1)
        return custom_tags.get(variable) or preset.transform_merge_tag(variable)

    return MERGE_TAG.sub(substitute, content)


def strip_editor_classes(html: str, prefix: str = "ebb-node-") -> str:
    """Remove identification tokens from ``class`` attributes, dropping emptied ones."""

    def clean(match: "re.Match[str]") -> str:
        remaining = strip_node_class_tokens(match.group(2), prefix)
        if not remaining:
            return ""
        return f'{match.group(1)}class="{remaining}"'

    return _HTML_CLASS.sub(clean, html)


def export_for_esp(
    doc: Document,
    preset: Union[EspPreset, str],
    compiler: Compiler,
    merge_tags: Optional[Mapping[str, str]] = None,
    strip_classes: bool = True,
    wrap_html: Optional[Callable[[str], str]] = None,
    include: Optional[NodeFilter] = None,
    config: Optional[SerializerConfig] = None,
) -> EspExportResult:
    """Compile a document into HTML ready for one provider.

    Args:
        doc: Document to export
        preset: Preset object or registered preset id
        compiler: MJML to HTML compiler
        merge_tags: Variable to tag mappings overriding the preset
        strip_classes: Remove editor identification classes from the HTML
        wrap_html: Final transformation applied after provider post-processing
        include: Conditional content filter
        config: Serializer settings

    Returns:
        EspExportResult with the final HTML and any compiler errors

    Raises:
        UnknownPresetError: If ``preset`` is an id with no registered preset

    Examples:
        >>> result = export_for_esp(doc, "mailchimp", compiler)
        >>> "*|FNAME|*" in result.html
        True
    """
    if isinstance(preset, str):
        resolved = find_preset(preset)
        if resolved is None:
            raise UnknownPresetError(f"Unknown ESP preset: {preset}")
        preset = resolved

    config = config or SerializerConfig()
    markup = document_to_markup(doc, include, replace(config, emit_node_ids=False))
    markup = transform_merge_tags(markup, preset, merge_tags)

    compiled = compile_markup(markup, compiler)
    html = compiled.html
    if strip_classes:
        html = strip_editor_classes(html, config.node_class_prefix)
    if preset.post_process is not None:
        html = preset.post_process(html)
    if wrap_html is not None:
        html = wrap_html(html)

    logger.info(
        "Document exported",
        extra={"preset": preset.id, "html_length": len(html), "error_count": len(compiled.errors)},
    )
    return EspExportResult(html=html, markup=markup, preset_id=preset.id, errors=compiled.errors)
