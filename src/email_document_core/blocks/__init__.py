"""Block library and starter templates."""

from .library import (
    ALL_BLOCKS,
    COMPOSITE_BLOCKS,
    CONTENT_BLOCKS,
    LAYOUT_BLOCKS,
    VARIABLE_BLOCK_PREFIX,
    BlockCategory,
    BlockDefinition,
    all_blocks,
    blocks_by_category,
    find_block,
    variable_blocks,
)
from .starters import STARTER_TEMPLATES, StarterTemplate, find_starter

__all__ = [
    "ALL_BLOCKS",
    "COMPOSITE_BLOCKS",
    "CONTENT_BLOCKS",
    "LAYOUT_BLOCKS",
    "VARIABLE_BLOCK_PREFIX",
    "BlockCategory",
    "BlockDefinition",
    "all_blocks",
    "blocks_by_category",
    "find_block",
    "variable_blocks",
    "STARTER_TEMPLATES",
    "StarterTemplate",
    "find_starter",
]
