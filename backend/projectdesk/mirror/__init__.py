# Mirror (secondary service) replication
from .client import (
    MirrorClient,
    MirrorError,
    MirrorHTTPError,
    MirrorOp,
    MirrorResource,
    MirrorUnavailableError,
    NoActiveSessionError,
    SessionProvider,
    delete_body,
    update_body,
)
from .outbox import MirrorOutbox, ReplayReport
from .writer import MirrorWriter, SyncResult, SyncStatus

__all__ = [
    "MirrorClient",
    "MirrorError",
    "MirrorHTTPError",
    "MirrorOp",
    "MirrorResource",
    "MirrorUnavailableError",
    "NoActiveSessionError",
    "SessionProvider",
    "delete_body",
    "update_body",
    "MirrorOutbox",
    "ReplayReport",
    "MirrorWriter",
    "SyncResult",
    "SyncStatus",
]
