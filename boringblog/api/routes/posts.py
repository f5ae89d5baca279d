from fastapi import APIRouter, Depends, Query, status

from boringblog.adapters.clock import SystemClock
from boringblog.adapters.sqlite.repos import SQLitePostRepo
from boringblog.api.deps import (
    get_clock,
    get_policy,
    get_post_repo,
    get_renderer,
    get_requester,
    get_rules,
    require_user,
)
from boringblog.api.schemas import (
    DeleteResponse,
    PostCreateRequest,
    PostListResponse,
    PostResponse,
    PostUpdateRequest,
)
from boringblog.components.listing import ListPostsInput, run_list_posts
from boringblog.components.posts import (
    CreatePostInput,
    DeletePostInput,
    GetPostInput,
    UpdatePostInput,
    run_create,
    run_delete,
    run_get,
    run_update,
)
from boringblog.components.richtext import HtmlRenderer
from boringblog.domain.entities import Requester
from boringblog.domain.policy import PolicyEngine
from boringblog.rules.models import Rules

router = APIRouter()


@router.get("", response_model=PostListResponse)
def list_posts(
    page: int = 1,
    limit: int | None = None,
    tag: str | None = None,
    author: str | None = None,
    published: bool = Query(True, description="false lists drafts (requires login)"),
    requester: Requester = Depends(get_requester),
    repo: SQLitePostRepo = Depends(get_post_repo),
    rules: Rules = Depends(get_rules),
) -> PostListResponse:
    result = run_list_posts(
        ListPostsInput(
            requester=requester,
            page=page,
            limit=limit,
            tag=tag,
            author=author,
            drafts=not published,
        ),
        repo=repo,
        pagination=rules.pagination,
    )
    return PostListResponse(
        posts=[PostResponse.from_post(p) for p in result.posts],
        total=result.total,
        page=result.page,
        limit=result.limit,
        total_pages=result.total_pages,
    )


@router.post("", response_model=PostResponse, status_code=status.HTTP_201_CREATED)
def create_post(
    body: PostCreateRequest,
    author: Requester = Depends(require_user),
    repo: SQLitePostRepo = Depends(get_post_repo),
    renderer: HtmlRenderer = Depends(get_renderer),
    clock: SystemClock = Depends(get_clock),
) -> PostResponse:
    output = run_create(
        CreatePostInput(
            author=author,
            title=body.title,
            content=body.content,
            tags=body.tags,
            cover_image=body.cover_image,
            published=body.published,
            pinned=body.pinned,
        ),
        repo=repo,
        renderer=renderer,
        time=clock,
    )
    return PostResponse.from_post(output.post)


@router.get("/{slug}", response_model=PostResponse)
def get_post(
    slug: str,
    requester: Requester = Depends(get_requester),
    repo: SQLitePostRepo = Depends(get_post_repo),
) -> PostResponse:
    output = run_get(GetPostInput(requester=requester, slug=slug), repo=repo)
    return PostResponse.from_post(output.post)


@router.put("/{slug}", response_model=PostResponse)
def update_post(
    slug: str,
    body: PostUpdateRequest,
    actor: Requester = Depends(require_user),
    repo: SQLitePostRepo = Depends(get_post_repo),
    renderer: HtmlRenderer = Depends(get_renderer),
    clock: SystemClock = Depends(get_clock),
    policy: PolicyEngine = Depends(get_policy),
) -> PostResponse:
    output = run_update(
        UpdatePostInput(actor=actor, slug=slug, changes=body.model_dump(exclude_unset=True)),
        repo=repo,
        renderer=renderer,
        time=clock,
        policy=policy,
    )
    return PostResponse.from_post(output.post)


@router.delete("/{slug}", response_model=DeleteResponse)
def delete_post(
    slug: str,
    actor: Requester = Depends(require_user),
    repo: SQLitePostRepo = Depends(get_post_repo),
    policy: PolicyEngine = Depends(get_policy),
) -> DeleteResponse:
    output = run_delete(DeletePostInput(actor=actor, slug=slug), repo=repo, policy=policy)
    return DeleteResponse(success=output.success)
