# Engine Modules
from .inheritance import (
    DEFAULT_BLOCK_NAMES,
    BlockState,
    find_master_block,
    inherit,
    resolve_blocks,
    seed_blocks,
)

__all__ = [
    "DEFAULT_BLOCK_NAMES",
    "BlockState",
    "find_master_block",
    "inherit",
    "resolve_blocks",
    "seed_blocks",
]
