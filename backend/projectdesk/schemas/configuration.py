"""
Configuration Schemas

Pydantic models for the configurator and BRD endpoints.
"""
from typing import Dict, List, Optional
from pydantic import BaseModel

from ..services.configurations import ConfigurationView
from .sync import SyncFields, sync_fields


class BlockResponse(BaseModel):
    """A configurator block, resolved against the master project."""
    id: Optional[str] = None
    block_order: int
    block_name: str
    text_content: str = ""
    image_url: Optional[str] = None
    image_name: Optional[str] = None
    image_size: Optional[int] = None
    is_read_only: bool = False
    source_block_id: Optional[str] = None

    model_config = {"from_attributes": True}


class ConfigurationResponse(SyncFields):
    """A project's configuration document."""
    id: str
    project_id: str
    is_master: bool
    brd_content: str = ""
    business_profile_url: Optional[str] = None
    business_profile_name: Optional[str] = None
    business_map_url: Optional[str] = None
    business_map_name: Optional[str] = None
    blocks: List[BlockResponse] = []

    @classmethod
    def from_view(cls, view: ConfigurationView) -> "ConfigurationResponse":
        configuration = view.configuration
        return cls(
            id=configuration.id,
            project_id=configuration.project_id,
            is_master=view.is_master,
            brd_content=configuration.brd_content,
            business_profile_url=configuration.business_profile_url,
            business_profile_name=configuration.business_profile_name,
            business_map_url=configuration.business_map_url,
            business_map_name=configuration.business_map_name,
            blocks=[BlockResponse.model_validate(block) for block in view.blocks],
            **sync_fields(view.sync),
        )


class BlocksSave(BaseModel):
    """Block text keyed by block id."""
    blocks: Dict[str, str]

    model_config = {"extra": "forbid"}


class BrdUpdate(BaseModel):
    """New BRD text."""
    brd_content: str

    model_config = {"extra": "forbid"}
