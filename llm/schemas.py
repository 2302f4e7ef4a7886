"""
情绪分析结果契约
同一份契约既作为请求中的JSON Schema发给模型，也用于本地校验模型返回
"""
# 标准库导包
from typing import List, Literal, get_args

# 第三方库导包
from pydantic import BaseModel, ConfigDict, Field, field_validator

EmotionName = Literal[
    "joy",
    "gratitude",
    "serenity",
    "interest",
    "hope",
    "pride",
    "amusement",
    "love",
    "awe",
    "sadness",
    "anger",
    "fear",
    "anxiety",
    "guilt",
    "shame",
    "disgust",
    "loneliness",
    "fatigue",
    "boredom",
    "surprise",
    "confusion",
    "nostalgia",
    "ambivalence",
]

# 情绪词表（23个小写英文词）
EMOTION_VOCABULARY: tuple[str, ...] = get_args(EmotionName)

MIN_DOMINANT_EMOTIONS = 3
MAX_DOMINANT_EMOTIONS = 5


class MoodAnalysis(BaseModel):
    """情绪分析结果，严格模式：不做类型转换，越界、数量不符或词表外情绪均校验失败"""

    model_config = ConfigDict(strict=True, extra="ignore", frozen=True)

    overall_mood_score: int = Field(..., ge=0, le=100, description="整体情绪效价，0最消极，100最积极")
    energy_level: int = Field(..., ge=0, le=100, description="情绪唤醒度，0低落被动，100高度亢奋")
    emotional_complexity: int = Field(..., ge=0, le=100, description="情绪复杂度，0单一，100复杂矛盾")
    dominant_emotions: List[EmotionName] = Field(
        ...,
        min_length=MIN_DOMINANT_EMOTIONS,
        max_length=MAX_DOMINANT_EMOTIONS,
        description="3-5个主导情绪",
    )

    @field_validator("dominant_emotions")
    @classmethod
    def _unique_emotions(cls, value: List[str]) -> List[str]:
        if len(set(value)) != len(value):
            raise ValueError("主导情绪不能重复")
        return value


MOOD_ANALYSIS_JSON_SCHEMA = {
    "name": "mood_analysis",
    "strict": True,
    "schema": {
        "type": "object",
        "properties": {
            "overall_mood_score": {
                "type": "integer",
                "description": "The net valence of the emotional state, from 0 (most negative) to 100 (most positive).",
            },
            "energy_level": {
                "type": "integer",
                "description": "Emotional arousal level, from 0 (lethargic, passive) to 100 (highly energetic, agitated).",
            },
            "emotional_complexity": {
                "type": "integer",
                "description": "Score from 0 (emotionally simple) to 100 (highly complex, conflicting emotions).",
            },
            "dominant_emotions": {
                "type": "array",
                "description": "The top 3-5 detected emotions from the predefined lowercase list.",
                "items": {"type": "string", "enum": list(EMOTION_VOCABULARY)},
                "minItems": MIN_DOMINANT_EMOTIONS,
                "maxItems": MAX_DOMINANT_EMOTIONS,
            },
        },
        "required": [
            "overall_mood_score",
            "energy_level",
            "emotional_complexity",
            "dominant_emotions",
        ],
        "additionalProperties": False,
    },
}
