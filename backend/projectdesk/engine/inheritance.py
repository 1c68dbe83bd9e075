"""
Configurator Inheritance Policy

Decides which configurator blocks of an ordinary project inherit their
content from the master project. Pure functions over BlockState values,
independent of storage.

Precedence when matching a project block to a master block:
1. the master block whose id equals the block's source_block_id
2. otherwise, the master block with the same block_order

A matched master block that has text or an image makes the project
block read-only, and the block shows the master's content. A master
block with neither leaves the project block editable with its own
content. Inheritance is evaluated at load time and flows one way,
master to project.
"""
from dataclasses import dataclass, replace
from typing import Iterable, List, Optional, Sequence

DEFAULT_BLOCK_NAMES = [
    "BOM Preferences",
    "Shifts",
    "Labor Codes",
    "Production Preferences",
    "Production Preferences Branch",
    "Production Order Type",
    "Production Labor codes",
    "Inventory Planning Preferences",
    "MPS Type",
    "Inventory Planning Bucket",
    "Estimate Preferences",
    "Estimate Classes",
    "Configurator Preferences",
    "Features",
]


@dataclass(frozen=True)
class BlockState:
    """Storage-independent view of a configurator block."""
    block_order: int
    block_name: str = ""
    text_content: str = ""
    image_url: Optional[str] = None
    image_name: Optional[str] = None
    image_size: Optional[int] = None
    is_read_only: bool = False
    source_block_id: Optional[str] = None
    id: Optional[str] = None

    @property
    def has_content(self) -> bool:
        return bool(self.text_content) or bool(self.image_url)


def find_master_block(
    block: BlockState,
    master_blocks: Sequence[BlockState],
) -> Optional[BlockState]:
    """Find the master block a project block corresponds to."""
    if block.source_block_id:
        for master in master_blocks:
            if master.id == block.source_block_id:
                return master
    for master in master_blocks:
        if master.block_order == block.block_order:
            return master
    return None


def inherit(block: BlockState, master: Optional[BlockState]) -> BlockState:
    """Apply a master block's content to a project block."""
    if master is None:
        return replace(block, is_read_only=False)
    if not master.has_content:
        return replace(block, is_read_only=False, source_block_id=block.source_block_id or master.id)

    return replace(
        block,
        text_content=master.text_content or block.text_content,
        image_url=master.image_url or block.image_url,
        image_name=master.image_name or block.image_name,
        image_size=master.image_size or block.image_size,
        is_read_only=True,
        source_block_id=block.source_block_id or master.id,
    )


def resolve_blocks(
    blocks: Iterable[BlockState],
    master_blocks: Sequence[BlockState],
) -> List[BlockState]:
    """Resolve inheritance for every block of a project, in block order."""
    resolved = [inherit(block, find_master_block(block, master_blocks)) for block in blocks]
    return sorted(resolved, key=lambda b: b.block_order)


def seed_blocks(
    master_blocks: Sequence[BlockState],
    names: Sequence[str] = DEFAULT_BLOCK_NAMES,
) -> List[BlockState]:
    """
    Initial blocks for a configuration that has none.

    Seeded blocks are numbered from 1 and copy the master block at the
    same position. Every positional match records the master block as
    the source, empty or not.
    """
    seeded = []
    for index, name in enumerate(names, start=1):
        block = BlockState(block_order=index, block_name=name)
        master = next((m for m in master_blocks if m.block_order == index), None)
        seeded.append(inherit(block, master))
    return seeded
