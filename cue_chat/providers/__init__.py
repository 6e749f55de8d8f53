"""GenAI Provider 集成层。

该包下的模块负责：
- 定义宿主协作者协议 (base)。
- 维护 Provider 与模型配置 (registry)。
- SSE 增量解码 (sse) 与流式客户端实现 (streaming_client)。
"""

from typing import Optional

from cue_chat.config.settings import settings
from cue_chat.prompts import load_system_prompt
from cue_chat.providers.registry import get_provider_config
from cue_chat.providers.streaming_client import StreamingChatClient


def resolve_system_prompt(cfg=None) -> Optional[str]:
    """配置中显式给出的 system_prompt 优先（空串表示不使用），否则读取默认提示词。"""

    cfg = cfg or settings
    explicit = getattr(cfg, "system_prompt", None)
    if explicit is not None:
        return explicit or None
    return load_system_prompt(locale=getattr(cfg, "system_prompt_locale", "en"))


def create_client(name: Optional[str] = None, cfg=None) -> StreamingChatClient:
    """根据名称创建流式客户端，默认取配置中的 provider。"""

    cfg = cfg or settings
    provider_name = (name or getattr(cfg, "default_provider", "rcac")).lower()
    return StreamingChatClient(
        cfg,
        system_prompt=resolve_system_prompt(cfg),
        provider=get_provider_config(provider_name),
    )
