"""
Rating模型 - AI情绪评分表及主导情绪表
"""
# 标准库导包
from datetime import datetime

# 第三方库导包
from sqlalchemy import String, Integer, DateTime, ForeignKey, CheckConstraint, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

# 项目内部导包
from storage.database import Base


class Rating(Base):
    """情绪评分表，一条日记最多一条评分，只删除重建不原地更新"""

    __tablename__ = "ratings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    entry_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("entries.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
        comment="所属日记，一对一",
    )
    overall_mood_score: Mapped[int] = mapped_column(Integer, nullable=False, comment="整体情绪效价 0-100")
    energy_level: Mapped[int] = mapped_column(Integer, nullable=False, comment="情绪唤醒度 0-100")
    emotional_complexity: Mapped[int] = mapped_column(Integer, nullable=False, comment="情绪复杂度 0-100")
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)

    # 关系定义
    dominant_emotions: Mapped[list["RatingEmotion"]] = relationship(
        "RatingEmotion",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="RatingEmotion.id",
    )

    __table_args__ = (
        CheckConstraint("overall_mood_score BETWEEN 0 AND 100", name="ck_rating_mood_range"),
        CheckConstraint("energy_level BETWEEN 0 AND 100", name="ck_rating_energy_range"),
        CheckConstraint("emotional_complexity BETWEEN 0 AND 100", name="ck_rating_complexity_range"),
    )

    @property
    def emotions(self) -> list[str]:
        """主导情绪名称列表"""
        return [item.emotion for item in self.dominant_emotions]

    def __repr__(self):
        return f"<Rating(id={self.id}, entry_id={self.entry_id}, overall_mood_score={self.overall_mood_score})>"


class RatingEmotion(Base):
    """评分的主导情绪标签"""

    __tablename__ = "rating_emotions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    rating_id: Mapped[int] = mapped_column(Integer, ForeignKey("ratings.id", ondelete="CASCADE"), nullable=False, index=True)
    emotion: Mapped[str] = mapped_column(String(20), nullable=False, comment="情绪词表中的小写英文词")

    __table_args__ = (
        UniqueConstraint("rating_id", "emotion", name="uq_rating_emotion"),
    )

    def __repr__(self):
        return f"<RatingEmotion(rating_id={self.rating_id}, emotion={self.emotion})>"
