"""
Configuration Service

A project's configuration document: BRD text, the two BRD files and the
configurator blocks.

Block content of ordinary projects is inherited from the master project
at load time (see engine.inheritance); inherited blocks are read-only
here. Configuration rows are mirrored to /vps-configurations, keyed by
project_id. Blocks and block images stay in the primary store.
"""
import enum
import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import selectinload

from ..engine.inheritance import BlockState, resolve_blocks, seed_blocks
from ..mirror import MirrorOp, MirrorResource, SyncResult
from ..models.configuration import ConfiguratorBlock, ProjectConfiguration
from ..models.project import Project
from ..tracer import trace_step, traced
from .base import EntityCollection, EntityNotFoundError, ReadOnlyBlockError
from .projects import find_master_project
from .storage import (
    CONFIGURATOR_IMAGES_BUCKET,
    PROJECT_FILES_BUCKET,
    LocalFileStorage,
    file_extension,
    get_storage,
)

logger = logging.getLogger(__name__)


class BrdDocumentKind(str, enum.Enum):
    """The two BRD file slots of a configuration."""
    PROFILE = "profile"
    MAP = "map"

    @property
    def url_field(self) -> str:
        return f"business_{self.value}_url"

    @property
    def name_field(self) -> str:
        return f"business_{self.value}_name"


@dataclass
class ConfigurationView:
    """A configuration with its blocks resolved against the master project."""
    configuration: ProjectConfiguration
    is_master: bool
    blocks: List[BlockState]
    sync: SyncResult

    def block(self, block_id: str) -> BlockState:
        for state in self.blocks:
            if state.id == block_id:
                return state
        raise EntityNotFoundError("block", block_id)


def block_state(block: ConfiguratorBlock) -> BlockState:
    return BlockState(
        id=block.id,
        block_order=block.block_order,
        block_name=block.block_name,
        text_content=block.text_content or "",
        image_url=block.image_url,
        image_name=block.image_name,
        image_size=block.image_size,
        is_read_only=block.is_read_only,
        source_block_id=block.source_block_id,
    )


def configuration_payload(configuration: ProjectConfiguration) -> Dict[str, Any]:
    """Configuration row as upserted to the mirror."""
    return {
        "project_id": configuration.project_id,
        "is_master": configuration.is_master,
        "brd_content": configuration.brd_content,
        "business_profile_url": configuration.business_profile_url,
        "business_profile_name": configuration.business_profile_name,
        "business_map_url": configuration.business_map_url,
        "business_map_name": configuration.business_map_name,
    }


class ConfigurationService(EntityCollection[ProjectConfiguration]):
    """Configurator and BRD operations for the acting user's projects."""

    model = ProjectConfiguration
    entity_name = "configuration"
    mirror_resource = MirrorResource.CONFIGURATIONS

    def __init__(self, db, principal, mirror=None, storage: Optional[LocalFileStorage] = None):
        super().__init__(db, principal, mirror)
        self.storage = storage or get_storage()

    def _owned(self):
        return (
            select(ProjectConfiguration)
            .join(Project, ProjectConfiguration.project_id == Project.id)
            .where(Project.user_id == self.principal.user_id)
            .options(selectinload(ProjectConfiguration.blocks))
        )

    def _mirror_key(self, configuration: ProjectConfiguration) -> str:
        return configuration.project_id

    def _create_payload(self, configuration: ProjectConfiguration) -> Dict[str, Any]:
        return configuration_payload(configuration)

    async def _master_blocks(self, master: Optional[Project]) -> List[BlockState]:
        if master is None:
            return []
        stmt = (
            select(ConfiguratorBlock)
            .join(ProjectConfiguration, ConfiguratorBlock.configuration_id == ProjectConfiguration.id)
            .where(ProjectConfiguration.project_id == master.id)
            .order_by(ConfiguratorBlock.block_order)
        )
        result = await self.db.execute(stmt)
        return [block_state(b) for b in result.scalars().all()]

    def _seed(self, configuration: ProjectConfiguration, master_blocks: List[BlockState]) -> None:
        for state in seed_blocks(master_blocks):
            configuration.blocks.append(ConfiguratorBlock(
                block_name=state.block_name,
                block_order=state.block_order,
                text_content=state.text_content,
                image_url=state.image_url,
                image_name=state.image_name,
                image_size=state.image_size,
                is_read_only=state.is_read_only,
                source_block_id=state.source_block_id,
            ))

    @traced("services.configurations")
    async def load(self, project_id: str) -> ConfigurationView:
        """
        Load a project's configuration, creating and seeding it on first use.

        Args:
            project_id: Project owned by the acting user

        Returns:
            ConfigurationView with blocks resolved against the master project
        """
        project = await self.require_project(project_id)
        master = await find_master_project(self.db)
        is_master = master is not None and master.id == project.id
        master_blocks = [] if is_master else await self._master_blocks(master)

        stmt = self._owned().where(ProjectConfiguration.project_id == project_id)
        result = await self.db.execute(stmt)
        configuration = result.scalar_one_or_none()

        sync = SyncResult.skipped()
        if configuration is None:
            configuration = ProjectConfiguration(
                project_id=project_id,
                is_master=is_master,
                brd_content="",
                blocks=[],
            )
            self._seed(configuration, master_blocks)
            self.db.add(configuration)
            await self._commit("create")
            logger.info(f"Created configuration for project {project_id} (master={is_master})")
            sync = await self._mirror(MirrorOp.CREATE, project_id, lambda: self._create_payload(configuration))
        elif not configuration.blocks:
            self._seed(configuration, master_blocks)
            await self._commit("seed blocks of")
            trace_step("services.configurations", f"Seeded {len(configuration.blocks)} blocks for {project_id}")

        self.items = [configuration]
        blocks = resolve_blocks([block_state(b) for b in configuration.blocks], master_blocks)
        return ConfigurationView(configuration=configuration, is_master=is_master, blocks=blocks, sync=sync)

    def _block_row(self, configuration: ProjectConfiguration, block_id: str) -> ConfiguratorBlock:
        for block in configuration.blocks:
            if block.id == block_id:
                return block
        raise EntityNotFoundError("block", block_id)

    async def _editable_block(self, project_id: str, block_id: str) -> ConfiguratorBlock:
        view = await self.load(project_id)
        if view.block(block_id).is_read_only:
            raise ReadOnlyBlockError(f"Block {block_id} is inherited from the master project")
        return self._block_row(view.configuration, block_id)

    # ---- blocks ----

    async def save_blocks(self, project_id: str, texts: Dict[str, str]) -> ConfigurationView:
        """
        Save block text. Every targeted block must be editable.

        Raises:
            EntityNotFoundError: if a block id is not part of the configuration
            ReadOnlyBlockError: if a block is inherited from the master project
        """
        view = await self.load(project_id)
        for block_id in texts:
            if view.block(block_id).is_read_only:
                raise ReadOnlyBlockError(f"Block {block_id} is inherited from the master project")

        for block_id, text in texts.items():
            self._block_row(view.configuration, block_id).text_content = text
        await self._commit("save blocks of")
        trace_step("services.configurations", f"Saved {len(texts)} blocks for {project_id}")

        return await self.load(project_id)

    async def upload_block_image(
        self,
        project_id: str,
        block_id: str,
        filename: str,
        data: bytes,
    ) -> ConfigurationView:
        """Store an image for an editable block, replacing any previous one."""
        block = await self._editable_block(project_id, block_id)
        key = f"{project_id}/{block_id}.{file_extension(filename)}"
        url = await self.storage.save(CONFIGURATOR_IMAGES_BUCKET, key, data, upsert=True)

        block.image_url = url
        block.image_name = filename
        block.image_size = len(data)
        await self._commit("store block image of")
        logger.info(f"Stored image {filename} for block {block_id}")

        return await self.load(project_id)

    async def remove_block_image(self, project_id: str, block_id: str) -> ConfigurationView:
        """Clear the image of an editable block. The stored file is kept."""
        block = await self._editable_block(project_id, block_id)
        block.image_url = None
        block.image_name = None
        block.image_size = None
        await self._commit("remove block image of")

        return await self.load(project_id)

    # ---- BRD ----

    async def _update_configuration(self, project_id: str, changes: Dict[str, Any]) -> ConfigurationView:
        view = await self.load(project_id)
        result = await self._apply_update(view.configuration, changes)
        view.sync = result.sync
        return view

    async def update_brd(self, project_id: str, content: str) -> ConfigurationView:
        """Replace the BRD text."""
        return await self._update_configuration(project_id, {"brd_content": content})

    async def upload_brd_document(
        self,
        project_id: str,
        kind: BrdDocumentKind,
        filename: str,
        data: bytes,
    ) -> ConfigurationView:
        """Store a business profile or business map file."""
        await self.require_project(project_id)
        key = f"brd-documents/{project_id}_{kind.value}_{int(time.time() * 1000)}.{file_extension(filename)}"
        url = await self.storage.save(PROJECT_FILES_BUCKET, key, data)

        return await self._update_configuration(project_id, {
            kind.url_field: url,
            kind.name_field: filename,
        })

    async def remove_brd_document(self, project_id: str, kind: BrdDocumentKind) -> ConfigurationView:
        """Detach a business profile or business map file."""
        return await self._update_configuration(project_id, {
            kind.url_field: None,
            kind.name_field: None,
        })
