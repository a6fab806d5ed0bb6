"""Pydantic models for families, posts, engagement and profiles."""

from typing import Any, Literal

from pydantic import BaseModel, Field


class Need(BaseModel):
    """Something a family needs help with (food, medical care, ...)."""

    id: str
    icon: str
    title: str
    description: str


class CrisisFamily(BaseModel):
    """A fundraising profile."""

    id: str
    name: str
    location: str
    situation: str
    story: str
    profile_image: str
    cover_image: str | None = None
    video_url: str | None = None
    fundraising_link: str
    fundraising_goal: float = 0.0
    fundraising_current: float = 0.0
    verified: bool = False
    tags: list[str] = Field(default_factory=list)
    needs: list[Need] = Field(default_factory=list)
    created_at: str

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "CrisisFamily":
        """Build from a ``crisis_families`` row (snake_case column names)."""
        return cls(
            id=row["id"],
            name=row["name"],
            location=row["location"],
            situation=row["situation"],
            story=row["story"],
            profile_image=row["profile_image_url"],
            cover_image=row.get("cover_image_url") or None,
            video_url=row.get("video_url") or None,
            fundraising_link=row["fundraising_link"],
            fundraising_goal=float(row.get("fundraising_goal") or 0),
            fundraising_current=float(row.get("fundraising_current") or 0),
            verified=bool(row.get("verified")),
            tags=row.get("tags") or [],
            needs=row.get("needs") or [],
            created_at=row["created_at"],
        )

    @property
    def fundraising_progress(self) -> float:
        """Fraction of the goal raised, clamped to 0..1."""
        if self.fundraising_goal <= 0:
            return 0.0
        return max(0.0, min(1.0, self.fundraising_current / self.fundraising_goal))


class FamilyInput(BaseModel):
    """Fields accepted when adding a new family."""

    name: str
    location: str
    situation: str
    story: str
    profile_image_url: str
    cover_image_url: str | None = None
    video_url: str | None = None
    fundraising_link: str
    fundraising_goal: float
    fundraising_current: float
    verified: bool = False
    tags: list[str]
    needs: list[Need]

    def to_row(self) -> dict[str, Any]:
        row = self.model_dump()
        row["cover_image_url"] = self.cover_image_url or None
        row["video_url"] = self.video_url or None
        return row


class FamilyPost(BaseModel):
    """A text update written for a family."""

    id: str
    family_id: str
    content: str
    hashtags: list[str] = Field(default_factory=list)
    created_at: str
    updated_at: str | None = None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "FamilyPost":
        """Build from a ``family_posts`` row."""
        return cls(
            id=row["id"],
            family_id=row["family_id"],
            content=row["content"],
            hashtags=row.get("hashtags") or [],
            created_at=row["created_at"],
            updated_at=row.get("updated_at"),
        )


class EngagementCounts(BaseModel):
    """Like and share totals for a family."""

    likes_count: int = 0
    shares_count: int = 0


class Profile(BaseModel):
    """A supporter's ``profiles`` row."""

    id: str
    display_name: str | None = None
    role: str = "supporter"
    points_earned: int = 0
    current_streak: int = 0
    level: int = 1
    total_donations: float = 0

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "Profile":
        """Build from a ``profiles`` row. NULL counters read as their defaults."""
        return cls(
            id=row["id"],
            display_name=row.get("display_name"),
            role=row.get("role") or "supporter",
            points_earned=row.get("points_earned") or 0,
            current_streak=row.get("current_streak") or 0,
            level=row.get("level") or 1,
            total_donations=float(row.get("total_donations") or 0),
        )


class AuthUser(BaseModel):
    """The signed-in user together with their profile."""

    id: str
    email: str
    profile: Profile | None = None


class FeedPost(BaseModel):
    """One entry of the merged home feed."""

    id: str
    family_id: str
    family_name: str
    family_image: str
    type: Literal["photo", "video", "text"]
    media_url: str | None = None
    content: str | None = None
    caption: str = ""
    hashtags: list[str] = Field(default_factory=list)
    likes: int = 0
    shares: int = 0
    liked: bool = False
    created_at: str
    post_type: Literal["family", "update"]
