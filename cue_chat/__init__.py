"""cue_chat 顶层包。

该包提供规则优先、流式大模型兜底的对话前端核心实现，
包括配置加载、领域模型、规则匹配、重复提问记忆、
SSE 流式客户端以及音效/动画意图映射等能力。
"""

from cue_chat.agents.dispatcher import ResponseDispatcher
from cue_chat.providers.streaming_client import StreamingChatClient

__all__ = ["ResponseDispatcher", "StreamingChatClient"]
