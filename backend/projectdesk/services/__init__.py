"""
Services module for ProjectDesk.
"""
from .base import (
    EntityCollection,
    EntityNotFoundError,
    MutationResult,
    PrimaryStoreError,
    ReadOnlyBlockError,
    ServiceError,
)
from .storage import LocalFileStorage, StorageError, get_storage
from .projects import ProjectCollection, find_master_project
from .todos import TodoCollection
from .links import LinkCollection
from .notes import NoteCollection
from .meetings import MeetingChildKind, MeetingCollection
from .configurations import BrdDocumentKind, ConfigurationService, ConfigurationView
from .layouts import DEFAULT_TILES, InvalidLayoutError, LayoutStore, LayoutTile, SqlLayoutStore

__all__ = [
    "EntityCollection",
    "EntityNotFoundError",
    "MutationResult",
    "PrimaryStoreError",
    "ReadOnlyBlockError",
    "ServiceError",
    "LocalFileStorage",
    "StorageError",
    "get_storage",
    "ProjectCollection",
    "find_master_project",
    "TodoCollection",
    "LinkCollection",
    "NoteCollection",
    "MeetingChildKind",
    "MeetingCollection",
    "BrdDocumentKind",
    "ConfigurationService",
    "ConfigurationView",
    "DEFAULT_TILES",
    "InvalidLayoutError",
    "LayoutStore",
    "LayoutTile",
    "SqlLayoutStore",
]
