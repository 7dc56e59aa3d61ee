"""
content/store.py -- SQLAlchemy-backed persistence layer for club content.

Uses SQLAlchemy Core (not ORM) so the dataclasses in content/models.py remain
the authoritative domain representation. Swapping SQLite for MySQL or
PostgreSQL is a connection string change.

Pattern: Repository + Data Mapper. ContentStore is the repository; the
_row_to_* functions are the mappers. Route handlers never touch SQL directly.

Security: all queries use bound parameters. No f-strings in SQL.

Tenant scoping is NOT enforced here. Every list query filters by club_id,
but deciding whether the caller may write under a club is the gate's job
(auth.dependencies); handlers call it before reaching the store.

Usage:
    store = ContentStore("sqlite:///clubsite.db")
    member_id = store.create_team_member(TeamMember(club_id="robotics", name="Ada", role="President"))
    store.list_team("robotics")
    store.close()
"""

import json
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Column, Index, Integer, MetaData, String, Table, Text
from sqlalchemy.engine import Engine

from content.models import ApplicationForm, BlogPost, GalleryEvent, NewsArticle, TeamMember
from core.db import make_engine

_DEFAULT_DB_URL = "sqlite:///clubsite.db"

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

metadata = MetaData()

_team = Table(
    "team_members",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("club_id", String(64), nullable=False),
    Column("name", String(255), nullable=False),
    Column("role", String(50), nullable=False),
    Column("grade", String(50)),
    Column("bio", Text),
    Column("photo_url", String(512)),
    Index("ix_team_members_club", "club_id"),
)

_news = Table(
    "news_articles",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("club_id", String(64), nullable=False),
    Column("title", String(255), nullable=False),
    Column("author", String(255), nullable=False),
    Column("content", Text, nullable=False),
    Column("image_url", String(512)),
    Column("created_at", String(32), nullable=False),
    Index("ix_news_articles_club", "club_id"),
)

_blogs = Table(
    "blog_posts",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("club_id", String(64), nullable=False),
    Column("title", String(255), nullable=False),
    Column("author", String(255), nullable=False),
    Column("excerpt", Text, nullable=False),
    Column("content", Text, nullable=False),
    Column("image_url", String(512)),
    Column("created_at", String(32), nullable=False),
    Index("ix_blog_posts_club", "club_id"),
)

_gallery = Table(
    "gallery_events",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("club_id", String(64), nullable=False),
    Column("title", String(255), nullable=False),
    Column("images", Text, nullable=False),  # JSON array serialized as text
    Column("created_at", String(32), nullable=False),
    Index("ix_gallery_events_club", "club_id"),
)

_forms = Table(
    "application_forms",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("club_id", String(64), nullable=False),
    Column("url", String(512), nullable=False),
    Column("file_name", String(255), nullable=False),
    Column("updated_at", String(32), nullable=False),
    Index("ix_application_forms_club", "club_id"),
)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class ContentStore:
    def __init__(self, db_url: str = _DEFAULT_DB_URL, pool_size: int = 10, engine: Optional[Engine] = None) -> None:
        # A caller-supplied engine is shared and stays open on close().
        self._owns_engine = engine is None
        self.engine: Engine = engine if engine is not None else make_engine(db_url, pool_size)
        metadata.create_all(self.engine)

    # ------------------------------------------------------------------
    # Team
    # ------------------------------------------------------------------

    def list_team(self, club_id: str) -> list[TeamMember]:
        """Return a club's roster in insertion order."""
        with self.engine.connect() as conn:
            rows = conn.execute(_team.select().where(_team.c.club_id == club_id).order_by(_team.c.id)).fetchall()
        return [_row_to_member(r) for r in rows]

    def get_team_member(self, member_id: int) -> Optional[TeamMember]:
        """Fetch a single team member by ID. Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(_team.select().where(_team.c.id == member_id)).fetchone()
        return _row_to_member(row) if row is not None else None

    def create_team_member(self, member: TeamMember) -> int:
        """Insert a new team member and return its assigned database ID."""
        with self.engine.connect() as conn:
            result = conn.execute(
                _team.insert().values(
                    club_id=member.club_id,
                    name=member.name,
                    role=member.role,
                    grade=member.grade,
                    bio=member.bio,
                    photo_url=member.photo_url,
                )
            )
            conn.commit()
            return result.inserted_primary_key[0]

    def update_team_member(self, member_id: int, **fields) -> bool:
        """Update mutable fields on an existing team member.

        Accepts any subset of: name, role, grade, bio, photo_url. club_id is
        not updatable -- moving a member between clubs would bypass the
        tenant check on the destination club.

        Returns True if a row was updated, False if member_id was not found.
        """
        if "club_id" in fields:
            raise ValueError("club_id cannot be changed")
        with self.engine.connect() as conn:
            result = conn.execute(_team.update().where(_team.c.id == member_id).values(**fields))
            conn.commit()
        return result.rowcount > 0

    def delete_team_member(self, member_id: int) -> bool:
        """Delete a team member. Returns True if deleted, False if not found."""
        with self.engine.connect() as conn:
            result = conn.execute(_team.delete().where(_team.c.id == member_id))
            conn.commit()
        return result.rowcount > 0

    # ------------------------------------------------------------------
    # News
    # ------------------------------------------------------------------

    def list_news(self, club_id: str) -> list[NewsArticle]:
        """Return a club's news, newest first."""
        with self.engine.connect() as conn:
            rows = conn.execute(
                _news.select()
                .where(_news.c.club_id == club_id)
                .order_by(_news.c.created_at.desc(), _news.c.id.desc())
            ).fetchall()
        return [_row_to_news(r) for r in rows]

    def get_news(self, article_id: int) -> Optional[NewsArticle]:
        with self.engine.connect() as conn:
            row = conn.execute(_news.select().where(_news.c.id == article_id)).fetchone()
        return _row_to_news(row) if row is not None else None

    def create_news(self, article: NewsArticle) -> int:
        """Insert a news article and return its ID. created_at is set here."""
        with self.engine.connect() as conn:
            result = conn.execute(
                _news.insert().values(
                    club_id=article.club_id,
                    title=article.title,
                    author=article.author,
                    content=article.content,
                    image_url=article.image_url,
                    created_at=_now_iso(),
                )
            )
            conn.commit()
            return result.inserted_primary_key[0]

    # ------------------------------------------------------------------
    # Blogs
    # ------------------------------------------------------------------

    def list_blogs(self, club_id: str) -> list[BlogPost]:
        """Return a club's blog posts, newest first."""
        with self.engine.connect() as conn:
            rows = conn.execute(
                _blogs.select()
                .where(_blogs.c.club_id == club_id)
                .order_by(_blogs.c.created_at.desc(), _blogs.c.id.desc())
            ).fetchall()
        return [_row_to_blog(r) for r in rows]

    def get_blog(self, post_id: int) -> Optional[BlogPost]:
        with self.engine.connect() as conn:
            row = conn.execute(_blogs.select().where(_blogs.c.id == post_id)).fetchone()
        return _row_to_blog(row) if row is not None else None

    def create_blog(self, post: BlogPost) -> int:
        """Insert a blog post and return its ID. created_at is set here."""
        with self.engine.connect() as conn:
            result = conn.execute(
                _blogs.insert().values(
                    club_id=post.club_id,
                    title=post.title,
                    author=post.author,
                    excerpt=post.excerpt,
                    content=post.content,
                    image_url=post.image_url,
                    created_at=_now_iso(),
                )
            )
            conn.commit()
            return result.inserted_primary_key[0]

    # ------------------------------------------------------------------
    # Gallery
    # ------------------------------------------------------------------

    def list_gallery(self, club_id: str) -> list[GalleryEvent]:
        """Return a club's gallery events in insertion order."""
        with self.engine.connect() as conn:
            rows = conn.execute(
                _gallery.select().where(_gallery.c.club_id == club_id).order_by(_gallery.c.id)
            ).fetchall()
        return [_row_to_gallery(r) for r in rows]

    def get_gallery_event(self, event_id: int) -> Optional[GalleryEvent]:
        with self.engine.connect() as conn:
            row = conn.execute(_gallery.select().where(_gallery.c.id == event_id)).fetchone()
        return _row_to_gallery(row) if row is not None else None

    def create_gallery_event(self, event: GalleryEvent) -> int:
        """Insert a gallery event and return its ID. images are stored as JSON text."""
        with self.engine.connect() as conn:
            result = conn.execute(
                _gallery.insert().values(
                    club_id=event.club_id,
                    title=event.title,
                    images=json.dumps(event.images),
                    created_at=_now_iso(),
                )
            )
            conn.commit()
            return result.inserted_primary_key[0]

    # ------------------------------------------------------------------
    # Application forms
    # ------------------------------------------------------------------

    def get_application_form(self, club_id: str) -> Optional[ApplicationForm]:
        """Return the club's current (newest) application form, or None."""
        with self.engine.connect() as conn:
            row = conn.execute(
                _forms.select()
                .where(_forms.c.club_id == club_id)
                .order_by(_forms.c.updated_at.desc(), _forms.c.id.desc())
                .limit(1)
            ).fetchone()
        return _row_to_form(row) if row is not None else None

    def save_application_form(self, form: ApplicationForm) -> ApplicationForm:
        """Record a new application form upload. Previous uploads are kept as history."""
        updated_at = _now_iso()
        with self.engine.connect() as conn:
            result = conn.execute(
                _forms.insert().values(
                    club_id=form.club_id,
                    url=form.url,
                    file_name=form.file_name,
                    updated_at=updated_at,
                )
            )
            conn.commit()
        return ApplicationForm(
            id=result.inserted_primary_key[0],
            club_id=form.club_id,
            url=form.url,
            file_name=form.file_name,
            updated_at=updated_at,
        )

    def close(self) -> None:
        if self._owns_engine:
            self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mappers (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_member(row) -> TeamMember:
    return TeamMember(
        id=row.id,
        club_id=row.club_id,
        name=row.name,
        role=row.role,
        grade=row.grade,
        bio=row.bio,
        photo_url=row.photo_url,
    )


def _row_to_news(row) -> NewsArticle:
    return NewsArticle(
        id=row.id,
        club_id=row.club_id,
        title=row.title,
        author=row.author,
        content=row.content,
        image_url=row.image_url,
        created_at=row.created_at,
    )


def _row_to_blog(row) -> BlogPost:
    return BlogPost(
        id=row.id,
        club_id=row.club_id,
        title=row.title,
        author=row.author,
        excerpt=row.excerpt,
        content=row.content,
        image_url=row.image_url,
        created_at=row.created_at,
    )


def _row_to_gallery(row) -> GalleryEvent:
    return GalleryEvent(
        id=row.id,
        club_id=row.club_id,
        title=row.title,
        images=json.loads(row.images) if row.images else [],
        created_at=row.created_at,
    )


def _row_to_form(row) -> ApplicationForm:
    return ApplicationForm(
        id=row.id,
        club_id=row.club_id,
        url=row.url,
        file_name=row.file_name,
        updated_at=row.updated_at,
    )
