"""
Posts component - post lifecycle (create, update, publish, delete, get).
"""

from .component import (
    normalize_tag_names,
    run,
    run_create,
    run_delete,
    run_get,
    run_update,
)
from .models import (
    CreatePostInput,
    DeletePostInput,
    DeletePostOutput,
    GetPostInput,
    PostOutput,
    UpdatePostInput,
)
from .ports import PostRepoPort, RendererPort, TimePort

__all__ = [
    # Entry points
    "run",
    "run_create",
    "run_delete",
    "run_get",
    "run_update",
    "normalize_tag_names",
    # Input models
    "CreatePostInput",
    "DeletePostInput",
    "GetPostInput",
    "UpdatePostInput",
    # Output models
    "DeletePostOutput",
    "PostOutput",
    # Ports
    "PostRepoPort",
    "RendererPort",
    "TimePort",
]
