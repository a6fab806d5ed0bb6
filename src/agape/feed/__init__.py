"""Merged chronological feed of family posts and text updates."""

from agape.feed.service import (
    FamilyDetail,
    FeedService,
    PointsAward,
    family_to_post,
    share_message,
    text_post_to_post,
)

__all__ = [
    "FamilyDetail",
    "FeedService",
    "PointsAward",
    "family_to_post",
    "share_message",
    "text_post_to_post",
]
