"""统一的对话与结果数据模型。

本模块定义了规则引擎、流式客户端与分发器之间共享的标准数据结构：

- ChatMessage: 一条会话历史消息（system/user/assistant）。
- ChatRequest: 发给 GenAI 服务的完整流式请求。
- StreamOutcome: 一次流式调用的终态结果（成功文本或错误）。
- MatchResult / DispatchResult: 规则匹配与最终分发的结果。

Provider 适配层负责在这些模型与 HTTP JSON 之间做转换。
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Literal, Optional, Any, Dict, List, TYPE_CHECKING

if TYPE_CHECKING:
    # 仅在类型检查时导入，避免运行时循环依赖
    from cue_chat.domain.exceptions import BusinessError
    from cue_chat.domain.rules import Rule


# 会话历史中的消息角色（与 OpenAI 兼容接口的 role 字段对应）
Role = Literal["system", "user", "assistant"]

# 分发器使用的固定意图键
FALLBACK_INTENT = "fallback"
ALREADY_ASKED_INTENT = "already_asked"


@dataclass(frozen=True)
class ChatMessage:
    """会话历史中的一条消息。"""

    role: Role
    content: str

    def to_payload(self) -> Dict[str, Any]:
        return {"role": self.role, "content": self.content}


@dataclass
class ChatRequest:
    """一次完整的流式聊天请求。

    model 为逻辑模型名（如 "chat-fallback"），由 registry 映射为真实模型 ID。
    """

    model: str
    messages: List[ChatMessage]
    stream: bool = True


class ClientState(str, Enum):
    """StreamingChatClient 的状态机。"""

    IDLE = "idle"
    SENDING = "sending"
    STREAMING = "streaming"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class StreamOutcome:
    """一次流式调用的终态通知。

    - ok 为 True 时 text 为完整回复。
    - ok 为 False 时 error 携带 TransportError/ValidationError，text 为失败前已累积的片段。
    """

    ok: bool
    text: str = ""
    error: Optional["BusinessError"] = None


@dataclass(frozen=True)
class MatchResult:
    """规则匹配结果；rule 与 keyword 同时为 None 表示未命中。"""

    rule: Optional["Rule"] = None
    keyword: Optional[str] = None

    @property
    def matched(self) -> bool:
        return self.rule is not None


@dataclass
class DispatchResult:
    """分发器对一次提交的最终输出。

    - text: 回复文本。
    - intent_key: 用于挑选音效与动画的意图键。
    - source: 回复来源，"rule" / "memory" / "stream" / "fallback"。
    - meta: 附加信息（错误码等），主要用于日志。
    """

    text: str
    intent_key: str
    source: Literal["rule", "memory", "stream", "fallback"]
    meta: Dict[str, Any] = field(default_factory=dict)
