import logging
from pathlib import PurePath

from fastapi import APIRouter, Depends, File, UploadFile

from boringblog.adapters.fs.filestore import FileSystemStore, random_upload_name
from boringblog.api.deps import get_file_store, get_policy, get_rules, require_user
from boringblog.api.schemas import UploadResponse
from boringblog.domain.entities import Requester
from boringblog.domain.errors import ForbiddenError, ValidationError
from boringblog.domain.policy import PolicyEngine
from boringblog.rules.models import Rules

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("", response_model=UploadResponse)
async def upload_image(
    file: UploadFile | None = File(None),
    actor: Requester = Depends(require_user),
    store: FileSystemStore = Depends(get_file_store),
    policy: PolicyEngine = Depends(get_policy),
    rules: Rules = Depends(get_rules),
) -> UploadResponse:
    """Store an image under a random name and return its public URL."""
    if not policy.check_permission(actor, "uploads:create"):
        raise ForbiddenError()
    if file is None or not file.filename:
        raise ValidationError("No file uploaded", field="file")

    cfg = rules.uploads
    content_type = file.content_type or ""
    if not content_type.startswith(cfg.allowed_mime_prefix):
        raise ValidationError("Only image files are allowed", field="file")

    ext = PurePath(file.filename).suffix.lower().lstrip(".")
    if ext not in cfg.allowlist_extensions:
        raise ValidationError(f"File type .{ext} is not allowed", field="file")

    # Read one byte past the limit to detect oversize without loading more
    data = await file.read(cfg.max_upload_bytes + 1)
    if len(data) > cfg.max_upload_bytes:
        raise ValidationError("File is too large", field="file")

    name = store.save(random_upload_name(ext), data)
    logger.info("Upload stored: %s (%d bytes) by %s", name, len(data), actor.user_id)
    return UploadResponse(url=f"/uploads/{name}")
