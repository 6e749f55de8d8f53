from collections import deque
from dataclasses import dataclass
from typing import Deque, List, Literal, Optional, Sequence, Tuple

from .models import ChatMessage


SpeakerRole = Literal["user", "bot"]


class ConversationHistory:
    """流式客户端独占的有序会话历史。

    不变式：最多一条 system 消息且位于首位；其后 user/assistant 交替，以 user 开头。
    只有 commit_turn 与 clear 会修改历史。
    """

    def __init__(self) -> None:
        self._messages: List[ChatMessage] = []

    def __len__(self) -> int:
        return len(self._messages)

    @property
    def messages(self) -> Tuple[ChatMessage, ...]:
        return tuple(self._messages)

    def stage_turn(self, system_prompt: Optional[str], user_text: str) -> List[ChatMessage]:
        """返回本轮请求要发送的完整消息列表，但不修改历史。"""

        staged = list(self._messages)
        if not staged and system_prompt and system_prompt.strip():
            staged.append(ChatMessage(role="system", content=system_prompt))
        staged.append(ChatMessage(role="user", content=user_text))
        return staged

    def commit_turn(self, staged: Sequence[ChatMessage], assistant_text: str) -> None:
        """成功结束后一次性写入暂存的消息和助手回复。"""

        self._messages = list(staged) + [ChatMessage(role="assistant", content=assistant_text)]

    def clear(self) -> None:
        self._messages.clear()


@dataclass(frozen=True)
class TranscriptEntry:
    text: str
    role: SpeakerRole


class Transcript:
    """界面展示用的消息记录，只保留最近 max_messages 条。"""

    def __init__(self, max_messages: int = 25) -> None:
        self._entries: Deque[TranscriptEntry] = deque(maxlen=max(1, max_messages))

    def add(self, text: str, role: SpeakerRole) -> TranscriptEntry:
        entry = TranscriptEntry(text=text, role=role)
        self._entries.append(entry)
        return entry

    @property
    def entries(self) -> Tuple[TranscriptEntry, ...]:
        return tuple(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def clear(self) -> None:
        self._entries.clear()

