"""
Posts component - multilingual blog post management.
"""

from .component import (
    REQUIRED_FIELDS,
    missing_required,
    run_create,
    run_delete,
    run_get,
    run_list,
    run_list_translations,
    run_update,
)
from .models import (
    CreatePostInput,
    DeletePostInput,
    GetPostInput,
    ListPostsInput,
    ListTranslationsInput,
    PostListOutput,
    PostOutput,
    PostValidationError,
    UpdatePostInput,
)
from .ports import PostRepoPort, TimePort

__all__ = [
    # Entry points
    "run_list",
    "run_get",
    "run_list_translations",
    "run_create",
    "run_update",
    "run_delete",
    # Helpers
    "REQUIRED_FIELDS",
    "missing_required",
    # Models
    "CreatePostInput",
    "UpdatePostInput",
    "GetPostInput",
    "ListPostsInput",
    "ListTranslationsInput",
    "DeletePostInput",
    "PostOutput",
    "PostListOutput",
    "PostValidationError",
    # Ports
    "PostRepoPort",
    "TimePort",
]
