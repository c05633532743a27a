"""WOO X websocket/REST plumbing that keeps a local order book in sync."""

from .channel import EventChannel, StreamFailure
from .settings import SyncConfig, load_config
from .synchronizer import SyncAborted, Synchronizer
from .ws_stream import WooXWSStream

__all__ = [
    "EventChannel",
    "StreamFailure",
    "SyncAborted",
    "SyncConfig",
    "Synchronizer",
    "WooXWSStream",
    "load_config",
]
