"""
Services layer
业务逻辑层
"""

from .session_service import SessionService
from .rating_service import RatingService
from .journal_service import JournalService
from .person_service import PersonService
from .rating_backfill_service import RatingBackfillService

__all__ = [
    "SessionService",
    "RatingService",
    "JournalService",
    "PersonService",
    "RatingBackfillService",
]
