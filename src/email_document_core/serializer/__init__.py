"""Serializer between documents, MJML markup and persisted design JSON.

Key Components:
    document_to_markup: Total Document -> MJML serialization
    markup_to_document: Never-failing MJML -> Document parsing
    to_design_json / document_from_design_json: Persisted envelope handling
    compile_document: Boundary to the external HTML compiler
    export_for_esp: Provider-specific export with merge tag presets
"""

from .compiler import CompilationResult, Compiler, compile_document, compile_markup
from .design_json import (
    EDITOR_DISCRIMINATOR,
    design_json_dumps,
    design_json_loads,
    document_from_design_json,
    is_editor_json,
    to_design_json,
)
from .export import (
    ESP_PRESETS,
    EspExportResult,
    EspPreset,
    UnknownPresetError,
    export_for_esp,
    find_preset,
    strip_editor_classes,
    transform_merge_tags,
)
from .reader import (
    MarkupReader,
    ReadResult,
    markup_to_document,
    markup_to_document_with_diagnostics,
)
from .writer import MarkupWriter, document_to_markup, node_class_token

__all__ = [
    "CompilationResult",
    "Compiler",
    "compile_document",
    "compile_markup",
    "EDITOR_DISCRIMINATOR",
    "design_json_dumps",
    "design_json_loads",
    "document_from_design_json",
    "is_editor_json",
    "to_design_json",
    "ESP_PRESETS",
    "EspExportResult",
    "EspPreset",
    "UnknownPresetError",
    "export_for_esp",
    "find_preset",
    "strip_editor_classes",
    "transform_merge_tags",
    "MarkupReader",
    "ReadResult",
    "markup_to_document",
    "markup_to_document_with_diagnostics",
    "MarkupWriter",
    "document_to_markup",
    "node_class_token",
]
