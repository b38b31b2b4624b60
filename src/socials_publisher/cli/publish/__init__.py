"""Publish feature - batch publishing and resource listing commands."""

from .commands import publish, resources
from .params import PublishParams
from .service import PublishService, load_batch_file

__all__ = [
    "publish",
    "resources",
    "PublishParams",
    "PublishService",
    "load_batch_file",
]
