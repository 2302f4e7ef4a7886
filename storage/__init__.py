"""
Storage层包
提供数据库连接、模型和Repository的统一访问接口
"""
# 项目内部导包
from .database import (
    get_session,
    init_db,
    cleanup_db,
    Base,
    engine,
    async_session_factory
)
from .models import (
    User,
    Entry,
    Rating,
    RatingEmotion,
    Person,
    Mention
)
from .repositories import (
    BaseRepository,
    UserRepository,
    EntryRepository,
    RatingRepository,
    PersonRepository,
    MentionRepository
)

__all__ = [
    # 数据库连接相关
    "get_session",
    "init_db",
    "cleanup_db",
    "Base",
    "engine",
    "async_session_factory",

    # 模型相关
    "User",
    "Entry",
    "Rating",
    "RatingEmotion",
    "Person",
    "Mention",

    # Repository相关
    "BaseRepository",
    "UserRepository",
    "EntryRepository",
    "RatingRepository",
    "PersonRepository",
    "MentionRepository",
]
