"""
Storage models package.
"""
# 项目内部导包
from .user import User
from .entry import Entry
from .rating import Rating, RatingEmotion
from .person import Person
from .mention import Mention

__all__ = [
    "User",
    "Entry",
    "Rating",
    "RatingEmotion",
    "Person",
    "Mention",
]
