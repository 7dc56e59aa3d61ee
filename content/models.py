"""
content/models.py -- Domain dataclasses for club content.

These are pure data containers with zero logic. Persistence lives in
content/store.py; access control lives in auth/.

Every record carries club_id: it is what the tenant check compares against
the caller's scope before any write.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class MemberRole(str, Enum):
    MEMBER = "Member"
    PRESIDENT = "President"
    VICE_PRESIDENT = "Vice-President"
    SECRETARY = "Secretary"
    TREASURER = "Treasurer"
    TECHNICAL_OFFICER = "Technical Officer"
    TEACHER_IN_CHARGE = "Teacher in Charge"


@dataclass
class TeamMember:
    """One person on a club's roster.

    photo_url points into /uploads/ once a photo has been uploaded.
    id is None before the record is written to the database.
    """

    club_id: str
    name: str
    role: str  # a MemberRole value
    grade: Optional[str] = None
    bio: Optional[str] = None
    photo_url: Optional[str] = None
    id: Optional[int] = None


@dataclass
class NewsArticle:
    club_id: str
    title: str
    author: str
    content: str
    image_url: Optional[str] = None
    id: Optional[int] = None
    created_at: str = ""  # ISO 8601, set by store on insert


@dataclass
class BlogPost:
    club_id: str
    title: str
    author: str
    excerpt: str
    content: str
    image_url: Optional[str] = None
    id: Optional[int] = None
    created_at: str = ""  # ISO 8601, set by store on insert


@dataclass
class GalleryEvent:
    """A titled set of photos. images are /uploads/ URLs in upload order."""

    club_id: str
    title: str
    images: list[str] = field(default_factory=list)
    id: Optional[int] = None
    created_at: str = ""  # ISO 8601, set by store on insert


@dataclass
class ApplicationForm:
    """A downloadable membership form. The newest row per club is current."""

    club_id: str
    url: str
    file_name: str
    id: Optional[int] = None
    updated_at: str = ""  # ISO 8601, set by store on insert
