"""重复提问记忆。

会话级的已见问题集合：只增不减、不做淘汰，进程重启后清空。
"""

from typing import Set


def normalize_utterance(text: str) -> str:
    return (text or "").strip().lower()


class QuestionMemory:
    def __init__(self) -> None:
        self._seen: Set[str] = set()

    def accept(self, utterance: str) -> bool:
        """记录一次提问，返回它是否为重复提问。

        重复时不会再次插入。
        """

        key = normalize_utterance(utterance)
        if key in self._seen:
            return True
        self._seen.add(key)
        return False

    def __contains__(self, utterance: str) -> bool:
        return normalize_utterance(utterance) in self._seen

    def __len__(self) -> int:
        return len(self._seen)
