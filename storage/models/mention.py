"""
Mention模型 - 日记提及联系人关联表
"""
# 标准库导包
from datetime import datetime

# 第三方库导包
from sqlalchemy import Integer, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

# 项目内部导包
from storage.database import Base


class Mention(Base):
    """日记与联系人的关联，删除任一端只删除关联本身"""

    __tablename__ = "mentions"

    entry_id: Mapped[int] = mapped_column(Integer, ForeignKey("entries.id", ondelete="CASCADE"), primary_key=True)
    person_id: Mapped[int] = mapped_column(Integer, ForeignKey("persons.id", ondelete="CASCADE"), primary_key=True, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)

    def __repr__(self):
        return f"<Mention(entry_id={self.entry_id}, person_id={self.person_id})>"
