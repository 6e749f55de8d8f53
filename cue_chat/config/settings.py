"""配置管理模块。

支持从环境变量、.env 以及 config.yaml 加载配置。
"""

import os
import warnings
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_FALLBACK_RESPONSE = "I did not understand that. Try typing: help."
DEFAULT_ALREADY_ASKED_RESPONSE = "You already asked me that. Try asking something new."
DEFAULT_READY_MESSAGE = "Ready. Type a message and press Enter."


def _load_config_from_yaml() -> Dict[str, Any]:
    """从 config.yaml 加载配置（若存在）。"""
    candidates = []
    explicit = os.getenv("CUE_CHAT_CONFIG_FILE")
    if explicit:
        candidates.append(Path(explicit).expanduser())
    candidates.extend([
        Path.cwd() / "config.yaml",
        Path(__file__).resolve().parents[2] / "config.yaml",
    ])

    seen: set[Path] = set()
    for path in candidates:
        if path in seen:
            continue
        seen.add(path)
        try:
            if path.exists():
                data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
                if isinstance(data, dict):
                    return data
                warnings.warn(f"Config file {path} is not a mapping, ignored")
        except (OSError, yaml.YAMLError) as exc:
            warnings.warn(f"Failed to read config file {path}: {exc}")
    return {}


class Settings(BaseSettings):
    """配置设置（使用 Pydantic）。"""

    # ---- Provider 相关配置 ----
    default_provider: str = Field(
        default="rcac",
        description="默认使用的 Provider 名称",
    )
    default_model: str = Field(
        default="chat-fallback",
        description="逻辑模型名，由 registry 映射为具体厂商模型",
    )
    genai_api_key: Optional[str] = Field(default=None, description="GenAI Studio API 密钥")
    genai_base_url: Optional[str] = Field(
        default=None,
        description="GenAI API 基础URL，为空时使用 registry 中的默认值",
    )
    system_prompt: Optional[str] = Field(
        default=None,
        description="管理员指令（system prompt），为空时读取 prompts 目录下的默认文本",
    )
    system_prompt_locale: str = Field(default="en", description="默认 system prompt 的语言目录")
    http_timeout: float = Field(default=30.0, ge=1.0, description="HTTP 超时时间（秒）")

    # ---- 对话规则 ----
    rules_file: Optional[str] = Field(default=None, description="规则表文件路径，为空时使用内置规则")
    fallback_response: str = Field(
        default=DEFAULT_FALLBACK_RESPONSE,
        description="没有规则命中且流式调用失败时的兜底回复",
    )
    already_asked_response: str = Field(
        default=DEFAULT_ALREADY_ASKED_RESPONSE,
        description="重复提问时的固定回复",
    )
    ready_message: str = Field(default=DEFAULT_READY_MESSAGE, description="启动时展示的提示语")
    max_transcript_messages: int = Field(default=25, ge=1, le=500, description="界面保留的最大消息数")
    stream_in_background: bool = Field(
        default=False,
        description="是否在后台线程执行流式请求",
    )

    # ---- 日志 ----
    log_dir: str = Field(default="logs", description="日志目录")
    log_redact_content: bool = Field(default=False, description="是否脱敏日志内容")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @staticmethod
    def _config_source() -> Dict[str, Any]:
        return _load_config_from_yaml()

    @field_validator("genai_api_key")
    @classmethod
    def validate_api_key(cls, v: Optional[str]) -> Optional[str]:
        if v and len(v) < 10:
            raise ValueError("API key seems too short")
        return v

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            cls._config_source,
            file_secret_settings,
        )


settings = Settings()
