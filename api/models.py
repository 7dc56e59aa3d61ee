"""
API request and response models for ClubSite REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in auth/models.py and
content/models.py, which own the internal domain representation. Route
handlers map between the two via the from_* factory methods.

Multipart routes (anything with a file) take Form()/UploadFile parameters
instead of a body model; their field constraints live on the route signature
and produce the same 422 validation envelope.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from auth.models import Account, Identity, Role
from content.models import ApplicationForm, BlogPost, GalleryEvent, NewsArticle, TeamMember

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

# Club ids appear in URLs and token claims. "*" (all clubs) never matches.
CLUB_ID_PATTERN = r"^[A-Za-z0-9_-]{1,64}$"

# Deliberately loose: one @, no whitespace, a dot in the domain.
EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


# ---------------------------------------------------------------------------
# Errors and health
# ---------------------------------------------------------------------------


class ErrorDetail(BaseModel):
    """Machine-readable error payload."""

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    detail: Optional[str] = None


class ErrorResponse(BaseModel):
    """Top-level error envelope returned on 4xx/5xx responses."""

    model_config = ConfigDict(frozen=True)

    error: ErrorDetail


class HealthResponse(BaseModel):
    """Response for GET /api/v1/health."""

    model_config = ConfigDict(frozen=True)

    status: str = "healthy"
    version: str
    components: dict[str, str] = Field(default_factory=dict)


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------


class LoginRequest(BaseModel):
    """Request body for POST /api/v1/auth/login."""

    model_config = ConfigDict(str_strip_whitespace=True)

    email: str = Field(min_length=3, max_length=255)
    password: str = Field(min_length=1, max_length=255)


class IdentityResponse(BaseModel):
    """The identity asserted by a token. club_id is "*" for superadmins."""

    model_config = ConfigDict(frozen=True)

    id: int
    email: str
    role: Role
    club_id: str

    @classmethod
    def from_identity(cls, identity: Identity) -> "IdentityResponse":
        return cls(id=identity.id, email=identity.email, role=identity.role, club_id=identity.club_id)


class LoginResponse(BaseModel):
    """Response for a successful login.

    expires_in is None when tokens are issued without an expiry.
    """

    model_config = ConfigDict(frozen=True)

    user: IdentityResponse
    token: str
    token_type: str = "bearer"
    expires_in: Optional[int] = None


# ---------------------------------------------------------------------------
# Admin management
# ---------------------------------------------------------------------------


class AdminCreate(BaseModel):
    """Request body for POST /api/v1/admins."""

    model_config = ConfigDict(str_strip_whitespace=True)

    email: str = Field(max_length=255, pattern=EMAIL_PATTERN)
    club_id: str = Field(pattern=CLUB_ID_PATTERN)

    @field_validator("email")
    @classmethod
    def lower_email(cls, value: str) -> str:
        return value.lower()


class AdminResponse(BaseModel):
    """One row of GET /api/v1/admins -- derived role/club view, never raw rows.

    club_id is "*" for superadmins and None for an admin whose club binding
    is missing (such an account cannot log in).
    """

    model_config = ConfigDict(frozen=True)

    id: int
    email: str
    role: Role
    club_id: Optional[str]

    @classmethod
    def from_account(cls, account: Account) -> "AdminResponse":
        if account.is_superadmin:
            return cls(id=account.id, email=account.email, role=Role.SUPERADMIN, club_id="*")
        return cls(id=account.id, email=account.email, role=Role.ADMIN, club_id=account.club_id)


class AdminCreatedResponse(AdminResponse):
    """Response for POST /api/v1/admins. temporary_password is shown ONCE."""

    temporary_password: str


# ---------------------------------------------------------------------------
# Club content
# ---------------------------------------------------------------------------


class TeamMemberResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    club_id: str
    name: str
    role: str
    grade: Optional[str] = None
    bio: Optional[str] = None
    photo_url: Optional[str] = None

    @classmethod
    def from_member(cls, member: TeamMember) -> "TeamMemberResponse":
        return cls(
            id=member.id,
            club_id=member.club_id,
            name=member.name,
            role=member.role,
            grade=member.grade,
            bio=member.bio,
            photo_url=member.photo_url,
        )


class NewsArticleResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    club_id: str
    title: str
    author: str
    content: str
    image_url: Optional[str] = None
    created_at: str

    @classmethod
    def from_article(cls, article: NewsArticle) -> "NewsArticleResponse":
        return cls(
            id=article.id,
            club_id=article.club_id,
            title=article.title,
            author=article.author,
            content=article.content,
            image_url=article.image_url,
            created_at=article.created_at,
        )


class BlogPostResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    club_id: str
    title: str
    author: str
    excerpt: str
    content: str
    image_url: Optional[str] = None
    created_at: str

    @classmethod
    def from_post(cls, post: BlogPost) -> "BlogPostResponse":
        return cls(
            id=post.id,
            club_id=post.club_id,
            title=post.title,
            author=post.author,
            excerpt=post.excerpt,
            content=post.content,
            image_url=post.image_url,
            created_at=post.created_at,
        )


class GalleryEventResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    club_id: str
    title: str
    images: list[str]
    created_at: str

    @classmethod
    def from_event(cls, event: GalleryEvent) -> "GalleryEventResponse":
        return cls(
            id=event.id,
            club_id=event.club_id,
            title=event.title,
            images=event.images,
            created_at=event.created_at,
        )


class ApplicationFormResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    club_id: str
    url: str
    file_name: str
    updated_at: str

    @classmethod
    def from_form(cls, form: ApplicationForm) -> "ApplicationFormResponse":
        return cls(club_id=form.club_id, url=form.url, file_name=form.file_name, updated_at=form.updated_at)
