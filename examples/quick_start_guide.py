#!/usr/bin/env python3
"""
Quick Start Guide for the Email Document Core.

This example walks through the editing loop: open a session, edit the
document, undo, receive change notifications, and recover a template from a
model reply.
"""

import json
import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from email_document_core import EditorConfig, open_session, try_parse_ai_response
from email_document_core.blocks import find_starter
from email_document_core.model import create_section


def editing_example():
    """Open a session from a starter and edit it."""

    print("🚀 QUICK START - Email Document Core")
    print("=" * 40)

    # Step 1: Open a session
    print("\n📄 Step 1: Opening a session")
    print("-" * 30)

    config = EditorConfig.default().override(**{"history.emit_delay_ms": 50})
    session = open_session(markup=None, config=config)
    session.replace_document(find_starter("newsletter").create())

    payloads = []
    session.subscribe(payloads.append)
    print(f"✅ Document has {len(session.document.body.children)} top-level sections")

    # Step 2: Edit
    print("\n✏️  Step 2: Editing")
    print("-" * 30)

    lead_column = session.document.body.children[1].children[0]
    result = session.insert_block("content-spacer", lead_column.id, 0)
    print(f"✅ Spacer inserted: {result.success}")

    rejected = session.insert_node(lead_column.id, 0, create_section())
    print(f"⚠️  Section in column rejected: {rejected.failure}")

    session.update_preview_text("Fresh from the editor")

    # Step 3: Undo and notification
    print("\n↩️  Step 3: Undo and notification")
    print("-" * 30)

    session.undo()
    session.flush()
    print(f"✅ Preview after undo: {session.document.head_attributes.preview_text!r}")
    print(f"📬 Payloads delivered: {len(payloads)}")
    print(f"📏 Markup length: {len(payloads[-1].markup)} characters")

    session.close()


def recovery_example():
    """Recover a document from a chatty model reply."""

    print("\n🤖 Recovering a template from a model reply")
    print("-" * 40)

    template = find_starter("welcome").create().to_dict()
    reply = f"Sure! Here is your welcome email:\n```json\n{json.dumps(template)}\n```\nEnjoy!"

    result = try_parse_ai_response(reply)
    if result.success:
        print(f"✅ Recovered via {result.strategy.value}, repaired={result.repaired}")
    else:
        print(f"❌ Failed: {result.failure.reason}")

    truncated = json.dumps(template)[:-3]
    result = try_parse_ai_response(truncated)
    print(f"✅ Truncated reply recovered: {result.success}, repaired={result.repaired}")


def main():
    """Main function."""
    try:
        editing_example()
        recovery_example()

        print("\n✅ All examples completed successfully!")
        return 0

    except Exception as e:
        print(f"\n❌ Example failed: {e}")
        import traceback
        traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
