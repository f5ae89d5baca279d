from fastapi import APIRouter, Depends, status

from boringblog.adapters.auth.crypto import JWTAuthAdapter
from boringblog.adapters.clock import SystemClock
from boringblog.adapters.dev_email import DevEmailAdapter
from boringblog.adapters.sqlite.repos import SQLiteUserRepo
from boringblog.api.deps import (
    Settings,
    get_app_settings,
    get_auth_adapter,
    get_clock,
    get_mailer,
    get_policy,
    get_user_repo,
    require_user,
)
from boringblog.api.schemas import InviteRequest, UserCreatedResponse, UserResponse
from boringblog.components.auth import (
    InviteAuthorInput,
    ListUsersInput,
    run_invite_author,
    run_list_users,
)
from boringblog.domain.entities import Requester
from boringblog.domain.policy import PolicyEngine

router = APIRouter()


@router.get("", response_model=list[UserResponse])
def list_users(
    actor: Requester = Depends(require_user),
    user_repo: SQLiteUserRepo = Depends(get_user_repo),
    policy: PolicyEngine = Depends(get_policy),
) -> list[UserResponse]:
    """List all users (ADMIN only)."""
    output = run_list_users(ListUsersInput(actor=actor), user_repo, policy)
    return [UserResponse.from_user(u) for u in output.users]


@router.post("/invite", response_model=UserCreatedResponse, status_code=status.HTTP_201_CREATED)
def invite_author(
    body: InviteRequest,
    actor: Requester = Depends(require_user),
    user_repo: SQLiteUserRepo = Depends(get_user_repo),
    auth: JWTAuthAdapter = Depends(get_auth_adapter),
    mailer: DevEmailAdapter = Depends(get_mailer),
    policy: PolicyEngine = Depends(get_policy),
    clock: SystemClock = Depends(get_clock),
    settings: Settings = Depends(get_app_settings),
) -> UserCreatedResponse:
    """Create an AUTHOR account and email a temporary password (ADMIN only)."""
    output = run_invite_author(
        InviteAuthorInput(actor=actor, name=body.name, email=body.email),
        user_repo,
        auth,
        mailer,
        policy,
        clock,
        site_url=settings.site_url,
    )
    return UserCreatedResponse(user=UserResponse.from_user(output.user))
