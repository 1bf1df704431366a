"""Editor session: the single owner of a live document.

Progressive disclosure: ``open_session`` builds a session from whatever the
host persisted, ``EditorSession`` exposes every editing operation. Each
successful operation commits a history snapshot and schedules a debounced
emission to subscribers.
"""

import copy
import json
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Union

from email_document_core.blocks.library import find_block
from email_document_core.history import EmitScheduler, HistoryEngine
from email_document_core.model.conditions import NodeFilter
from email_document_core.model.factory import create_default_document
from email_document_core.model.types import Document, FontDeclaration, Node
from email_document_core.serializer import (
    CompilationResult,
    Compiler,
    EspExportResult,
    EspPreset,
    compile_document,
    export_for_esp,
    design_json_loads,
    document_from_design_json,
    document_to_markup,
    is_editor_json,
    markup_to_document_with_diagnostics,
    to_design_json,
)
from email_document_core.serializer.reader import ReadResult
from email_document_core.shared import EditorConfig, get_logger, new_correlation_id
from email_document_core.tree import mutation
from email_document_core.tree.mutation import MutationResult

DesignJsonInput = Union[str, Dict[str, Any]]


@dataclass
class EmitPayload:
    """What subscribers receive after a burst of edits settles."""

    markup: str
    design_json: Dict[str, Any]
    html: Optional[str] = None
    errors: List[Any] = field(default_factory=list)


Listener = Callable[[EmitPayload], None]


class EditorSession:
    """Editing operations over one document with undo/redo and notification.

    Not-found identifiers are silent no-ops; rejected operations return the
    ``MutationResult`` carrying the failure and leave document and history
    untouched. Nodes passed in are copied before insertion, and nodes and
    documents handed back are copies, so the live document only changes
    through the session.

    Attributes:
        config: Immutable editor configuration
        correlation_id: Session id carried by every log record and read result
        history: Snapshot history of committed states
        scheduler: Debounced emitter feeding subscribers
    """

    def __init__(
        self,
        document: Optional[Document] = None,
        config: Optional[EditorConfig] = None,
        compiler: Optional[Compiler] = None,
    ) -> None:
        self.config = config or EditorConfig.default()
        self.compiler = compiler
        self.correlation_id = self.config.correlation_id or new_correlation_id()
        self.logger = get_logger(__name__, self.correlation_id, "editor_session")

        self._document = (document or create_default_document()).snapshot()
        self._listeners: List[Listener] = []
        self.history = HistoryEngine(
            self._document,
            self.config.history.max_entries,
            self.correlation_id,
        )
        self.scheduler = EmitScheduler(
            self._emit,
            self.config.history.emit_delay_ms,
            self.correlation_id,
        )

    # -- state -------------------------------------------------------------

    @property
    def document(self) -> Document:
        """Copy of the current document."""
        return self._document.snapshot()

    def find_node(self, node_id: str) -> Optional[Node]:
        """Copy of the node with ``node_id``, or None."""
        return copy.deepcopy(mutation.find_node(self._document, node_id))

    def can_undo(self) -> bool:
        return self.history.can_undo()

    def can_redo(self) -> bool:
        return self.history.can_redo()

    def _commit(self) -> None:
        self.history.commit(self._document)
        self.scheduler.schedule(self._document)

    def _apply(self, result: MutationResult) -> MutationResult:
        if result.success:
            self._commit()
        return replace(result, document=self.document, node=copy.deepcopy(result.node))

    # -- structure ---------------------------------------------------------

    def insert_node(self, parent_id: str, index: int, node: Node) -> MutationResult:
        return self._apply(
            mutation.insert_node(self._document, parent_id, index, copy.deepcopy(node))
        )

    def insert_block(
        self, block_id: str, parent_id: str, index: int, variables: Iterable[str] = ()
    ) -> MutationResult:
        """Insert a fresh instance of a library block, or of a block for one of ``variables``."""
        block = find_block(block_id, variables)
        if block is None:
            self.logger.warning("Unknown block", extra={"block_id": block_id})
            return MutationResult.not_found(self.document)
        return self.insert_node(parent_id, index, block.create())

    def insert_nodes_after(self, reference_id: str, nodes: List[Node]) -> MutationResult:
        owned = [copy.deepcopy(node) for node in nodes]
        return self._apply(mutation.insert_nodes_after(self._document, reference_id, owned))

    def delete_node(self, node_id: str) -> MutationResult:
        return self._apply(mutation.remove_node(self._document, node_id))

    def duplicate_node(self, node_id: str) -> MutationResult:
        return self._apply(mutation.duplicate_node(self._document, node_id))

    def move_node(self, node_id: str, new_parent_id: str, index: int) -> MutationResult:
        return self._apply(mutation.move_node(self._document, node_id, new_parent_id, index))

    def move_node_up(self, node_id: str) -> MutationResult:
        return self._apply(mutation.move_node_up(self._document, node_id))

    def move_node_down(self, node_id: str) -> MutationResult:
        return self._apply(mutation.move_node_down(self._document, node_id))

    # -- values ------------------------------------------------------------

    def update_node_attribute(
        self, node_id: str, key: str, value: Optional[str]
    ) -> MutationResult:
        """Set an attribute; None removes it."""
        if value is None:
            return self._apply(mutation.remove_attribute(self._document, node_id, key))
        return self._apply(mutation.update_attribute(self._document, node_id, key, value))

    def update_node_content(self, node_id: str, html: str) -> MutationResult:
        return self._apply(mutation.update_content(self._document, node_id, html))

    def update_head_style(self, tag: str, key: str, value: Optional[str]) -> None:
        """Set a default style for ``tag`` (``mj-all`` for every tag); None removes it."""
        styles = self._document.head_attributes.default_styles
        if value is None:
            tag_styles = styles.get(tag)
            if tag_styles is None or key not in tag_styles:
                return
            del tag_styles[key]
            if not tag_styles:
                del styles[tag]
        else:
            styles.setdefault(tag, {})[key] = value
        self._commit()

    def update_preview_text(self, text: str) -> None:
        self._document.head_attributes.preview_text = text
        self._commit()

    def add_font(self, name: str, href: str) -> None:
        """Declare a web font, replacing an existing declaration of the same name."""
        fonts = [font for font in self._document.head_attributes.fonts if font.name != name]
        fonts.append(FontDeclaration(name=name, href=href))
        self._document.head_attributes.fonts = fonts
        self._commit()

    # -- whole document ----------------------------------------------------

    def replace_document(self, document: Document) -> None:
        """Swap in a new document as one undoable step."""
        self._document = document.snapshot()
        self._commit()
        self.logger.info("Document replaced")

    def _load(self, document: Document) -> None:
        self._document = document
        self.history.reset(document)
        self.scheduler.schedule(document)

    def load_from_markup(self, markup: str) -> ReadResult:
        """Load MJML markup, starting a fresh history."""
        result = markup_to_document_with_diagnostics(markup, self.correlation_id)
        self._load(result.document)
        self.logger.info(
            "Loaded from markup", extra={"coercions": result.coercion_count}
        )
        return result

    def load_from_design_json(self, data: DesignJsonInput) -> Document:
        """Load persisted design JSON, starting a fresh history.

        Raises:
            RecoveryError: If the payload is not a valid editor envelope
        """
        if isinstance(data, str):
            document = design_json_loads(data)
        else:
            document = document_from_design_json(data)
        self._load(document)
        self.logger.info("Loaded from design JSON")
        return self.document

    def load(
        self,
        markup: Optional[str] = None,
        design_json: Optional[DesignJsonInput] = None,
    ) -> None:
        """Load whatever the host persisted, preferring editor design JSON."""
        if design_json is not None:
            data = design_json
            if isinstance(data, str):
                try:
                    data = json.loads(data)
                except json.JSONDecodeError:
                    data = None
            if is_editor_json(data):
                self.load_from_design_json(data)
                return
            self.logger.info("Design JSON ignored, not an editor payload")

        if markup:
            self.load_from_markup(markup)
        else:
            self._load(create_default_document())

    # -- history -----------------------------------------------------------

    def undo(self) -> bool:
        document = self.history.undo()
        if document is None:
            return False
        self._document = document
        self.scheduler.schedule(document)
        return True

    def redo(self) -> bool:
        document = self.history.redo()
        if document is None:
            return False
        self._document = document
        self.scheduler.schedule(document)
        return True

    # -- output ------------------------------------------------------------

    def get_markup(self, include: Optional[NodeFilter] = None) -> str:
        return document_to_markup(self._document, include, self.config.serializer)

    def get_design_json(self) -> Dict[str, Any]:
        return to_design_json(self._document)

    def get_html(self, include: Optional[NodeFilter] = None) -> Optional[CompilationResult]:
        """Compile the current document; None when no compiler is configured."""
        if self.compiler is None:
            return None
        return compile_document(self._document, self.compiler, include, self.config.serializer)

    def export_for_esp(
        self,
        preset: Union[EspPreset, str],
        merge_tags: Optional[Mapping[str, str]] = None,
        include: Optional[NodeFilter] = None,
    ) -> Optional[EspExportResult]:
        """Export the current document for a provider; None when no compiler is configured."""
        if self.compiler is None:
            return None
        return export_for_esp(
            self._document,
            preset,
            self.compiler,
            merge_tags=merge_tags,
            include=include,
            config=self.config.serializer,
        )


    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns a function that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def trigger_emit(self) -> None:
        """Emit the current state now, bypassing the debounce window."""
        self.scheduler.schedule(self._document)
        self.scheduler.flush()

    def flush(self) -> bool:
        """Deliver a pending emission immediately."""
        return self.scheduler.flush()

    def close(self) -> None:
        """Drop any pending emission."""
        self.scheduler.cancel()

    def _emit(self, snapshot: Document) -> None:
        payload = EmitPayload(
            markup=document_to_markup(snapshot, config=self.config.serializer),
            design_json=to_design_json(snapshot),
        )
        if self.compiler is not None:
            compiled = compile_document(snapshot, self.compiler, config=self.config.serializer)
            payload.html = compiled.html
            payload.errors = list(compiled.errors)

        for listener in list(self._listeners):
            listener(payload)


def open_session(
    markup: Optional[str] = None,
    design_json: Optional[DesignJsonInput] = None,
    config: Optional[EditorConfig] = None,
    compiler: Optional[Compiler] = None,
) -> EditorSession:
    """Create a session loaded from persisted markup and/or design JSON.

    Examples:
        >>> session = open_session(markup='<mjml><mj-body></mj-body></mjml>')
        >>> session.document.body.type.value
        'mj-body'
    """
    session = EditorSession(config=config, compiler=compiler)
    if markup is not None or design_json is not None:
        session.load(markup=markup, design_json=design_json)
        session.scheduler.cancel()
    return session
