"""
Listing component - visibility rules and paginated post queries.
"""

from .component import (
    apply_filters,
    clamp_limit,
    clamp_page,
    run_list_posts,
    run_list_public,
    visibility_filter,
)
from .models import ListPostsInput, PostPage, PostQuery
from .ports import PaginationRulesPort, PostQueryPort

__all__ = [
    # Entry points
    "run_list_posts",
    "run_list_public",
    # Predicates
    "visibility_filter",
    "apply_filters",
    "clamp_page",
    "clamp_limit",
    # Models
    "ListPostsInput",
    "PostPage",
    "PostQuery",
    # Ports
    "PaginationRulesPort",
    "PostQueryPort",
]
