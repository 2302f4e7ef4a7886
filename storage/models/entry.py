"""
Entry模型 - 日记条目表
"""
# 标准库导包
from datetime import date, datetime
from typing import Optional

# 第三方库导包
from sqlalchemy import Integer, Text, Date, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

# 项目内部导包
from storage.database import Base


class Entry(Base):
    """日记条目表，每个作者每天最多一条"""

    __tablename__ = "entries"

    # 核心字段
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    author_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    content: Mapped[str] = mapped_column(Text, nullable=False, comment="富文本内容（HTML）")
    text_content: Mapped[str] = mapped_column(Text, nullable=False, comment="由content提取的纯文本，用于变更判断和情绪分析")
    entry_date: Mapped[date] = mapped_column(Date, nullable=False, comment="日记日期")
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow, index=True)

    # 关系定义
    rating: Mapped[Optional["Rating"]] = relationship(
        "Rating",
        uselist=False,
        cascade="all",
        passive_deletes=True,
    )
    mentions: Mapped[list["Mention"]] = relationship(
        "Mention",
        cascade="all",
        passive_deletes=True,
        order_by="Mention.person_id",
    )

    __table_args__ = (
        UniqueConstraint("author_id", "entry_date", name="uq_entry_author_date"),
    )

    def __repr__(self):
        return f"<Entry(id={self.id}, author_id={self.author_id}, entry_date={self.entry_date})>"
