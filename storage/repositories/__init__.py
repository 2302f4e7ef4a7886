"""
Storage repositories package.
"""
# 项目内部导包
from .base import BaseRepository
from .user_repository import UserRepository
from .entry_repository import EntryRepository
from .rating_repository import RatingRepository
from .person_repository import PersonRepository
from .mention_repository import MentionRepository

__all__ = [
    "BaseRepository",
    "UserRepository",
    "EntryRepository",
    "RatingRepository",
    "PersonRepository",
    "MentionRepository",
]
