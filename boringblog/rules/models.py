from pydantic import BaseModel, Field


class SiteRules(BaseModel):
    title: str
    description: str = ""
    language: str = "en"
    feed_item_count: int = 20


class PaginationRules(BaseModel):
    page_size: int = 20
    max_limit: int = 100


class AuthRules(BaseModel):
    session_ttl_minutes: int = 60 * 24 * 7
    password_min_length: int = 8
    reset_token_ttl_minutes: int = 60
    cookie_name: str = "boringblog_session"
    cookie_secure: bool = False


class WindowLimit(BaseModel):
    window_seconds: int
    max_attempts: int


class RateLimitRules(BaseModel):
    login: WindowLimit = Field(
        default_factory=lambda: WindowLimit(window_seconds=60, max_attempts=5)
    )


class UploadRules(BaseModel):
    max_upload_bytes: int = 10 * 1024 * 1024
    allowed_mime_prefix: str = "image/"
    allowlist_extensions: list[str] = Field(
        default_factory=lambda: ["jpg", "jpeg", "png", "gif", "webp", "avif"]
    )


class RbacRules(BaseModel):
    roles: dict[str, list[str]]


class OpsRules(BaseModel):
    required_env: list[str] = Field(default_factory=list)


class Rules(BaseModel):
    site: SiteRules
    pagination: PaginationRules = Field(default_factory=PaginationRules)
    auth: AuthRules = Field(default_factory=AuthRules)
    rate_limits: RateLimitRules = Field(default_factory=RateLimitRules)
    uploads: UploadRules = Field(default_factory=UploadRules)
    rbac: RbacRules
    ops: OpsRules = Field(default_factory=OpsRules)
