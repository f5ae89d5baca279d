from typing import Any

from boringblog.domain.entities import Post, Requester
from boringblog.rules.models import Rules


class PolicyEngine:
    def __init__(self, rules: Rules):
        self.rules = rules

    def check_permission(
        self,
        requester: Requester | None,
        action: str,
        resource: Any = None,
    ) -> bool:
        """
        Check if the requester may perform the action on the resource.

        Order of precedence:
        1. Role-Based Access Control (exact action, "*" or "scope:*")
        2. Ownership: "<action>_own" grants the action on resources the
           requester authored
        """
        if requester is None or not requester.is_logged_in or requester.role is None:
            return False

        allowed_actions = self.rules.rbac.roles.get(requester.role, [])

        # 1. RBAC
        if "*" in allowed_actions or action in allowed_actions:
            return True
        if ":" in action:
            scope = action.split(":")[0]
            if f"{scope}:*" in allowed_actions:
                return True

        # 2. Ownership
        if resource is not None and f"{action}_own" in allowed_actions:
            owner_id = getattr(resource, "author_id", None)
            if owner_id is not None and str(owner_id) == str(requester.user_id):
                return True

        return False

    def can_edit_post(self, requester: Requester, post: Post) -> bool:
        return self.check_permission(requester, "posts:edit", resource=post)

    def can_delete_post(self, requester: Requester, post: Post) -> bool:
        return self.check_permission(requester, "posts:delete", resource=post)

    def can_manage_users(self, requester: Requester) -> bool:
        return self.check_permission(requester, "users:manage")


def can_view_post(requester: Requester, post: Post) -> bool:
    """Published posts are public; drafts only for their author or an ADMIN."""
    if post.published:
        return True
    if not requester.is_logged_in:
        return False
    return requester.is_admin or str(requester.user_id) == str(post.author_id)
