"""Data services over the hosted backend."""

from agape.services.engagement import EngagementService, SeedSummary
from agape.services.families import FamiliesService, validate_family_data
from agape.services.points import PointsService
from agape.services.posts import FamilyPostsInput, ImportSummary, PostsService, TextPostInput

__all__ = [
    "EngagementService",
    "FamiliesService",
    "FamilyPostsInput",
    "ImportSummary",
    "PointsService",
    "PostsService",
    "SeedSummary",
    "TextPostInput",
    "validate_family_data",
]
