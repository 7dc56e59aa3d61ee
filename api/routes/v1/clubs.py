"""
api/routes/v1/clubs.py -- Club content routes (team, news, blogs, gallery, application form).

Routes:
  GET    /clubs/{club_id}/team          -- public roster
  POST   /clubs/{club_id}/team          -- add member (multipart, optional photo)
  PUT    /team/{member_id}              -- replace member fields (multipart, optional new photo)
  DELETE /team/{member_id}              -- remove member
  GET    /clubs/{club_id}/news          -- public, newest first
  POST   /clubs/{club_id}/news          -- publish article (multipart, optional image)
  GET    /clubs/{club_id}/blogs         -- public, newest first
  POST   /clubs/{club_id}/blogs         -- publish post (multipart, optional image)
  GET    /clubs/{club_id}/gallery       -- public
  POST   /clubs/{club_id}/gallery       -- add event with up to 10 images
  GET    /clubs/{club_id}/application   -- current application form (404 when none)
  PUT    /clubs/{club_id}/application   -- upload a new application form

Tenant scoping:
  Writes under /clubs/{club_id}/... depend on require_club_access, which
  compares the token's club scope with the path. /team/{member_id} has no
  club in the path, so the handler loads the member first and checks its
  stored club_id with ensure_club_access before changing anything.

File uploads:
  multipart/form-data. Size and extension checks live in content.files;
  rejections surface as 413 / 415 with the standard error envelope.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Path, Request, Response, UploadFile

from api.models import (
    CLUB_ID_PATTERN,
    ApplicationFormResponse,
    BlogPostResponse,
    ErrorDetail,
    GalleryEventResponse,
    NewsArticleResponse,
    TeamMemberResponse,
)
from auth.dependencies import ensure_club_access, get_current_identity, require_club_access
from auth.models import Identity
from content.files import FileKind, StoredFile, UploadRejected, UploadStorage
from content.models import ApplicationForm, BlogPost, GalleryEvent, MemberRole, NewsArticle, TeamMember
from content.store import ContentStore

logger = logging.getLogger("clubsite.content")

router = APIRouter()

_MAX_GALLERY_IMAGES = 10


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _not_found(message: str) -> HTTPException:
    return HTTPException(status_code=404, detail=ErrorDetail(code="not_found", message=message).model_dump())


def _has_file(upload: Optional[UploadFile]) -> bool:
    # Browsers submit an empty part with no filename when a file input is left blank.
    return upload is not None and bool(upload.filename)


async def _store_files(request: Request, uploads: list[UploadFile], kind: FileKind) -> list[StoredFile]:
    storage: UploadStorage = request.app.state.uploads
    try:
        return await storage.save_all(uploads, kind)
    except UploadRejected as exc:
        raise HTTPException(
            status_code=exc.status_code,
            detail=ErrorDetail(code=exc.code, message=exc.message).model_dump(),
        ) from exc


async def _store_optional_image(request: Request, upload: Optional[UploadFile]) -> Optional[str]:
    if not _has_file(upload):
        return None
    stored = await _store_files(request, [upload], FileKind.IMAGE)
    return stored[0].url


# ---------------------------------------------------------------------------
# Team
# ---------------------------------------------------------------------------


@router.get("/clubs/{club_id}/team", response_model=list[TeamMemberResponse])
def list_team(request: Request, club_id: str = Path(pattern=CLUB_ID_PATTERN)) -> list[TeamMemberResponse]:
    """Return the club's roster."""
    store: ContentStore = request.app.state.content_store
    return [TeamMemberResponse.from_member(m) for m in store.list_team(club_id)]


@router.post("/clubs/{club_id}/team", response_model=TeamMemberResponse, status_code=201)
async def create_team_member(
    request: Request,
    club_id: str = Path(pattern=CLUB_ID_PATTERN),
    name: str = Form(min_length=1, max_length=255),
    role: MemberRole = Form(MemberRole.MEMBER),
    grade: Optional[str] = Form(None, max_length=50),
    bio: Optional[str] = Form(None, max_length=5000),
    photo: Optional[UploadFile] = File(None),
    identity: Identity = Depends(require_club_access),
) -> TeamMemberResponse:
    """Add a member to the club's roster."""
    store: ContentStore = request.app.state.content_store
    photo_url = await _store_optional_image(request, photo)
    member_id = store.create_team_member(
        TeamMember(club_id=club_id, name=name, role=role.value, grade=grade, bio=bio, photo_url=photo_url)
    )
    return TeamMemberResponse.from_member(store.get_team_member(member_id))


@router.put("/team/{member_id}", response_model=TeamMemberResponse)
async def update_team_member(
    request: Request,
    member_id: int = Path(gt=0),
    name: str = Form(min_length=1, max_length=255),
    role: MemberRole = Form(MemberRole.MEMBER),
    grade: Optional[str] = Form(None, max_length=50),
    bio: Optional[str] = Form(None, max_length=5000),
    photo: Optional[UploadFile] = File(None),
    identity: Identity = Depends(get_current_identity),
) -> TeamMemberResponse:
    """Replace a member's fields. The existing photo is kept unless a new one is uploaded."""
    store: ContentStore = request.app.state.content_store
    member = store.get_team_member(member_id)
    if member is None:
        raise _not_found("Team member not found.")
    ensure_club_access(request, identity, member.club_id)

    fields: dict = {"name": name, "role": role.value, "grade": grade, "bio": bio}
    photo_url = await _store_optional_image(request, photo)
    if photo_url is not None:
        fields["photo_url"] = photo_url
    if not store.update_team_member(member_id, **fields):
        raise _not_found("Team member not found.")
    return TeamMemberResponse.from_member(store.get_team_member(member_id))


@router.delete("/team/{member_id}", status_code=204)
def delete_team_member(
    request: Request,
    member_id: int = Path(gt=0),
    identity: Identity = Depends(get_current_identity),
) -> Response:
    """Remove a member from its club's roster."""
    store: ContentStore = request.app.state.content_store
    member = store.get_team_member(member_id)
    if member is None:
        raise _not_found("Team member not found.")
    ensure_club_access(request, identity, member.club_id)
    store.delete_team_member(member_id)
    return Response(status_code=204)


# ---------------------------------------------------------------------------
# News
# ---------------------------------------------------------------------------


@router.get("/clubs/{club_id}/news", response_model=list[NewsArticleResponse])
def list_news(request: Request, club_id: str = Path(pattern=CLUB_ID_PATTERN)) -> list[NewsArticleResponse]:
    """Return the club's news articles, newest first."""
    store: ContentStore = request.app.state.content_store
    return [NewsArticleResponse.from_article(a) for a in store.list_news(club_id)]


@router.post("/clubs/{club_id}/news", response_model=NewsArticleResponse, status_code=201)
async def create_news(
    request: Request,
    club_id: str = Path(pattern=CLUB_ID_PATTERN),
    title: str = Form(min_length=1, max_length=255),
    author: str = Form(min_length=1, max_length=255),
    content: str = Form(min_length=1, max_length=50_000),
    image: Optional[UploadFile] = File(None),
    identity: Identity = Depends(require_club_access),
) -> NewsArticleResponse:
    """Publish a news article under the club."""
    store: ContentStore = request.app.state.content_store
    image_url = await _store_optional_image(request, image)
    article_id = store.create_news(
        NewsArticle(club_id=club_id, title=title, author=author, content=content, image_url=image_url)
    )
    return NewsArticleResponse.from_article(store.get_news(article_id))


# ---------------------------------------------------------------------------
# Blogs
# ---------------------------------------------------------------------------


@router.get("/clubs/{club_id}/blogs", response_model=list[BlogPostResponse])
def list_blogs(request: Request, club_id: str = Path(pattern=CLUB_ID_PATTERN)) -> list[BlogPostResponse]:
    """Return the club's blog posts, newest first."""
    store: ContentStore = request.app.state.content_store
    return [BlogPostResponse.from_post(p) for p in store.list_blogs(club_id)]


@router.post("/clubs/{club_id}/blogs", response_model=BlogPostResponse, status_code=201)
async def create_blog(
    request: Request,
    club_id: str = Path(pattern=CLUB_ID_PATTERN),
    title: str = Form(min_length=1, max_length=255),
    author: str = Form(min_length=1, max_length=255),
    excerpt: str = Form(min_length=1, max_length=1000),
    content: str = Form(min_length=1, max_length=50_000),
    image: Optional[UploadFile] = File(None),
    identity: Identity = Depends(require_club_access),
) -> BlogPostResponse:
    """Publish a blog post under the club."""
    store: ContentStore = request.app.state.content_store
    image_url = await _store_optional_image(request, image)
    post_id = store.create_blog(
        BlogPost(club_id=club_id, title=title, author=author, excerpt=excerpt, content=content, image_url=image_url)
    )
    return BlogPostResponse.from_post(store.get_blog(post_id))


# ---------------------------------------------------------------------------
# Gallery
# ---------------------------------------------------------------------------


@router.get("/clubs/{club_id}/gallery", response_model=list[GalleryEventResponse])
def list_gallery(request: Request, club_id: str = Path(pattern=CLUB_ID_PATTERN)) -> list[GalleryEventResponse]:
    """Return the club's gallery events."""
    store: ContentStore = request.app.state.content_store
    return [GalleryEventResponse.from_event(e) for e in store.list_gallery(club_id)]


@router.post("/clubs/{club_id}/gallery", response_model=GalleryEventResponse, status_code=201)
async def create_gallery_event(
    request: Request,
    club_id: str = Path(pattern=CLUB_ID_PATTERN),
    title: str = Form(min_length=1, max_length=255),
    images: Optional[list[UploadFile]] = File(None),
    identity: Identity = Depends(require_club_access),
) -> GalleryEventResponse:
    """Create a gallery event from up to 10 uploaded images."""
    uploads = [u for u in (images or []) if _has_file(u)]
    if len(uploads) > _MAX_GALLERY_IMAGES:
        raise HTTPException(
            status_code=400,
            detail=ErrorDetail(
                code="too_many_files",
                message=f"A gallery event accepts at most {_MAX_GALLERY_IMAGES} images.",
            ).model_dump(),
        )
    stored = await _store_files(request, uploads, FileKind.IMAGE)

    store: ContentStore = request.app.state.content_store
    event_id = store.create_gallery_event(
        GalleryEvent(club_id=club_id, title=title, images=[s.url for s in stored])
    )
    return GalleryEventResponse.from_event(store.get_gallery_event(event_id))


# ---------------------------------------------------------------------------
# Application form
# ---------------------------------------------------------------------------


@router.get("/clubs/{club_id}/application", response_model=ApplicationFormResponse)
def get_application_form(request: Request, club_id: str = Path(pattern=CLUB_ID_PATTERN)) -> ApplicationFormResponse:
    """Return the club's current downloadable application form."""
    store: ContentStore = request.app.state.content_store
    form = store.get_application_form(club_id)
    if form is None:
        raise _not_found("Application form not found.")
    return ApplicationFormResponse.from_form(form)


@router.put("/clubs/{club_id}/application", response_model=ApplicationFormResponse)
async def upload_application_form(
    request: Request,
    club_id: str = Path(pattern=CLUB_ID_PATTERN),
    file: UploadFile = File(...),
    identity: Identity = Depends(require_club_access),
) -> ApplicationFormResponse:
    """Replace the club's application form. Earlier uploads stay on disk as history."""
    stored = await _store_files(request, [file], FileKind.DOCUMENT)
    store: ContentStore = request.app.state.content_store
    form = store.save_application_form(
        ApplicationForm(club_id=club_id, url=stored[0].url, file_name=stored[0].original_name)
    )
    logger.info("Application form for club=%s replaced by user_id=%s", club_id, identity.id)
    return ApplicationFormResponse.from_form(form)
