"""
LLM配置模块
负责解析和验证LLM提供商配置
"""
# 标准库导包
import os
from typing import Dict, Optional

# 第三方库导包
from pydantic import BaseModel

# 项目内部导包
from config import settings


class LLMModelConfig(BaseModel):
    """LLM模型配置"""
    id: str
    name: str


class LLMProviderConfig(BaseModel):
    """LLM提供商配置"""
    api_key: str = ""
    api_key_env: Optional[str] = None
    base_url: str
    models: Dict[str, LLMModelConfig]

    def resolved_api_key(self) -> str:
        """优先使用配置中的api_key，为空时读取api_key_env指定的环境变量"""
        if self.api_key:
            return self.api_key
        if self.api_key_env:
            return os.getenv(self.api_key_env, "")
        return ""


class LLMConfig(BaseModel):
    """LLM配置"""
    providers: Dict[str, LLMProviderConfig]
    default_provider: str
    default_model_key: str


def load_llm_config() -> LLMConfig:
    """
    从settings加载LLM配置

    Returns:
        LLMConfig对象

    Raises:
        ValueError: 默认提供商或默认模型不在配置中
    """
    providers = {
        name: LLMProviderConfig.model_validate(cfg)
        for name, cfg in settings.LLM_PROVIDERS.items()
    }

    config = LLMConfig(
        providers=providers,
        default_provider=settings.DEFAULT_LLM_PROVIDER,
        default_model_key=settings.DEFAULT_LLM_MODEL_KEY,
    )

    default_provider = config.providers.get(config.default_provider)
    if default_provider is None or config.default_model_key not in default_provider.models:
        raise ValueError(
            f"默认LLM配置无效: provider={config.default_provider}, model_key={config.default_model_key}"
        )

    return config


# 全局LLM配置实例
llm_config = load_llm_config()
