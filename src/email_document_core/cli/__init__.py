"""Command-line interface for the email document core.

This module provides the email-doc tool for converting between design JSON
and MJML, recovering documents from model replies, and dumping starters.
"""

from .main import main

__all__ = ["main"]
