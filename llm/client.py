"""
LLM客户端模块
基于AsyncOpenAI封装统一的LLM调用接口
"""
# 标准库导包
import asyncio
import json
import logging
from typing import Optional, List, Dict, Any

# 第三方库导包
import openai
from openai import AsyncOpenAI
from pydantic import ValidationError

# 项目内部导包
from config import settings
from exceptions import InvalidAnalysisError, ProviderUnavailableError
from prompt import MOOD_ANALYSIS_SYSTEM_PROMPT, MOOD_ANALYSIS_USER_PROMPT
from .config import llm_config, LLMConfig
from .schemas import MoodAnalysis, EMOTION_VOCABULARY, MOOD_ANALYSIS_JSON_SCHEMA

# 配置日志
logger = logging.getLogger(__name__)


def _strip_code_fence(text: str) -> str:
    """若存在 Markdown 的 ```json 代码块，则提取其中的内容"""
    if "```json" in text:
        return text.split("```json", 1)[1].split("```", 1)[0].strip()
    if text.strip().startswith("```"):
        return text.strip().strip("`").strip()
    return text


class LLMClient:
    """LLM客户端，支持多厂商和多模型切换"""

    def __init__(self, config: Optional[LLMConfig] = None):
        """
        初始化LLM客户端

        Args:
            config: LLM配置，如果为None则使用全局配置
        """
        self._config = config or llm_config
        self._clients: Dict[tuple[str, str], AsyncOpenAI] = {}

    def _get_client(self, provider: str, model_key: str) -> tuple[AsyncOpenAI, str]:
        """
        获取指定提供商和模型的客户端

        Args:
            provider: 提供商名称
            model_key: 模型键

        Returns:
            (AsyncOpenAI客户端, 模型ID)元组

        Raises:
            ValueError: 如果提供商或模型不存在
        """
        if provider not in self._config.providers:
            raise ValueError(f"提供商 '{provider}' 不存在")

        cfg = self._config.providers[provider]

        if model_key not in cfg.models:
            raise ValueError(f"模型键 '{model_key}' 在提供商 '{provider}' 中不存在")

        model_cfg = cfg.models[model_key]
        cache_key = (provider, model_key)

        # 使用缓存避免重复创建客户端
        if cache_key not in self._clients:
            self._clients[cache_key] = AsyncOpenAI(
                api_key=cfg.resolved_api_key(),
                base_url=cfg.base_url,
                max_retries=settings.LLM_MAX_RETRIES,
            )
            logger.info(f"创建LLM客户端: provider={provider}, model={model_cfg.name}")

        return self._clients[cache_key], model_cfg.id

    async def chat(
        self,
        messages: List[Dict[str, str]],
        provider: Optional[str] = None,
        model_key: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: Optional[int] = None,
        timeout: float = 30,
        response_format: Optional[Dict[str, Any]] = None,
    ) -> str:
        """
        发送聊天请求

        Args:
            messages: 消息列表，格式为 [{"role": "user", "content": "..."}]
            provider: 提供商名称，如果为None则使用默认提供商
            model_key: 模型键，如果为None则使用默认模型
            temperature: 温度参数，控制随机性
            max_tokens: 最大token数
            timeout: 请求超时（秒）
            response_format: 结构化输出约束，如 {"type": "json_schema", ...}

        Returns:
            AI回复内容

        Raises:
            ValueError: 如果提供商或模型不存在
            ProviderUnavailableError: 网络错误、超时或服务端返回错误
            InvalidAnalysisError: 输出因长度上限被截断
        """
        provider = provider or self._config.default_provider
        model_key = model_key or self._config.default_model_key

        client, model_id = self._get_client(provider, model_key)

        request_kwargs: Dict[str, Any] = {
            "model": model_id,
            "messages": messages,
            "temperature": temperature,
            "max_tokens": max_tokens,
            "timeout": timeout,
        }
        if response_format is not None:
            request_kwargs["response_format"] = response_format

        try:
            logger.debug(f"发送LLM请求: provider={provider}, model={model_id}")
            # 整体再加一层超时，连接阶段卡住也不会无限挂起
            response = await asyncio.wait_for(
                client.chat.completions.create(**request_kwargs),
                timeout=timeout,
            )
        except asyncio.TimeoutError as e:
            logger.error(f"LLM API调用超时: provider={provider}, timeout={timeout}s")
            raise ProviderUnavailableError(f"分析服务调用超时({timeout}s)", original_error=e) from e
        except openai.APIError as e:
            logger.error(f"LLM API调用失败: {str(e)}")
            raise ProviderUnavailableError(f"分析服务调用失败: {type(e).__name__}", original_error=e) from e

        if not response.choices:
            return ""

        choice = response.choices[0]
        if choice.finish_reason == "length":
            logger.warning(f"LLM输出达到长度上限被截断: provider={provider}, model={model_id}")
            raise InvalidAnalysisError("分析结果被截断")

        content = choice.message.content or ""
        logger.debug(f"LLM响应长度: {len(content)} 字符")
        return content

    async def analyze_mood(
        self,
        text: str,
        provider: Optional[str] = None,
        model_key: Optional[str] = None,
    ) -> MoodAnalysis:
        """
        分析日记纯文本的情绪，单次无状态调用，不携带任何历史消息

        Args:
            text: 日记纯文本，不能为空
            provider: 提供商名称
            model_key: 模型键

        Returns:
            通过校验的MoodAnalysis

        Raises:
            ValueError: 文本为空
            ProviderUnavailableError: 分析服务不可用或超时
            InvalidAnalysisError: 返回内容无法解析或不符合契约
        """
        if not text or not text.strip():
            raise ValueError("待分析文本不能为空")

        messages = [
            {"role": "system", "content": MOOD_ANALYSIS_SYSTEM_PROMPT.format(vocabulary=", ".join(EMOTION_VOCABULARY))},
            {"role": "user", "content": MOOD_ANALYSIS_USER_PROMPT.format(content=text)},
        ]

        response_text = await self.chat(
            messages=messages,
            provider=provider,
            model_key=model_key,
            temperature=0.3,  # 降低温度以获得更稳定的分析结果
            timeout=settings.ANALYSIS_TIMEOUT_SECONDS,
            response_format={"type": "json_schema", "json_schema": MOOD_ANALYSIS_JSON_SCHEMA},
        )

        return self.parse_mood_analysis(response_text)

    @staticmethod
    def parse_mood_analysis(response_text: str) -> MoodAnalysis:
        """
        解析并校验情绪分析响应，任何不符合契约的内容都整体拒绝

        Args:
            response_text: 模型返回的原始文本

        Returns:
            MoodAnalysis

        Raises:
            InvalidAnalysisError: 无法解析为JSON对象或校验失败
        """
        if not response_text or not response_text.strip():
            raise InvalidAnalysisError("分析服务返回为空")

        # 只接受完整合法的JSON，截断或需要修补的输出一律拒绝
        try:
            result = json.loads(_strip_code_fence(response_text))
        except json.JSONDecodeError as e:
            logger.warning(f"情绪分析返回不是合法JSON: {response_text[:200]}")
            raise InvalidAnalysisError("分析结果不是合法JSON", original_error=e) from e

        if not isinstance(result, dict):
            logger.warning(f"情绪分析返回不是JSON对象: {response_text[:200]}")
            raise InvalidAnalysisError("分析结果不是JSON对象")

        try:
            return MoodAnalysis.model_validate(result)
        except ValidationError as e:
            logger.warning(f"情绪分析结果校验失败: errors={e.error_count()}, 响应: {response_text[:200]}")
            raise InvalidAnalysisError(f"分析结果校验失败: {e.error_count()}个字段不符合要求", original_error=e) from e


def get_llm_client() -> LLMClient:
    """
    获取LLM客户端，作为FastAPI依赖使用

    Returns:
        LLMClient实例
    """
    return LLMClient()
