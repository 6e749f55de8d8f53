"""Server-Sent Events 增量解码。

流式响应按空行（``\\n\\n``）切分为事件块，块内只关心以 ``data:`` 开头的行：

    data: {"choices": [{"delta": {"content": "Hi"}}]}

    data: [DONE]

SseDecoder 负责缓冲原始字节并切出完整事件块的 data 载荷；
parse_payload 负责从单条 JSON 载荷中取出 ``choices[0].delta.content``。
两者都不会因为残缺或非法数据抛出异常。
"""

import codecs
import json
from typing import Any, Iterator, List, Optional, Tuple, Union

from cue_chat.infrastructure.logging.logger import logger


DONE_SENTINEL = "[DONE]"
EVENT_DELIMITER = "\n\n"
DATA_PREFIX = "data:"


class SseDecoder:
    """把任意切分的字节块还原为 data 载荷序列。

    一个多字节 UTF-8 字符被切到两个块中时，由增量解码器负责拼回。
    """

    def __init__(self) -> None:
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._buffer = ""

    @property
    def pending(self) -> str:
        """尚未凑成完整事件块的缓冲内容。"""

        return self._buffer

    def feed(self, chunk: Union[bytes, str]) -> List[str]:
        """追加一个原始块，返回其中所有已完整的 data 载荷（按到达顺序）。"""

        if isinstance(chunk, bytes):
            text = self._decoder.decode(chunk)
        else:
            text = chunk
        if not text:
            return []
        # 兼容 CRLF 换行的服务端
        self._buffer = (self._buffer + text).replace("\r\n", "\n")

        payloads: List[str] = []
        while True:
            split_index = self._buffer.find(EVENT_DELIMITER)
            if split_index < 0:
                break
            block = self._buffer[:split_index]
            self._buffer = self._buffer[split_index + len(EVENT_DELIMITER):]
            payloads.extend(self._parse_block(block))
        return payloads

    def flush(self) -> List[str]:
        """流结束时调用：把缓冲中没有以空行结尾的最后一块也当作完整事件解析。"""

        tail = self._decoder.decode(b"", final=True)
        block = (self._buffer + tail).replace("\r\n", "\n").strip("\n")
        self._buffer = ""
        if not block:
            return []
        return self._parse_block(block)

    def iter_feed(self, chunks) -> Iterator[str]:
        for chunk in chunks:
            yield from self.feed(chunk)

    @staticmethod
    def _parse_block(block: str) -> List[str]:
        return [
            line[len(DATA_PREFIX):].strip()
            for line in block.split("\n")
            if line.startswith(DATA_PREFIX)
        ]


def parse_payload(payload: str) -> Tuple[Optional[str], bool]:
    """解析单条 data 载荷，返回 (增量文本, 是否终止帧)。

    [DONE] 与带 finish_reason 的块视为终止帧；空载荷、非法 JSON 或没有
    content 字段时增量为 None。非法 JSON 只记录日志，不抛异常。
    """

    if payload == DONE_SENTINEL:
        return None, True
    if not payload:
        return None, False
    try:
        data = json.loads(payload)
    except json.JSONDecodeError:
        logger.debug("Dropped malformed stream payload", extra={"extra": {"size": len(payload)}})
        return None, False
    choice = _first_choice(data)
    if choice is None:
        return None, False
    return _delta_content(choice), bool(choice.get("finish_reason"))


def extract_delta(payload: str) -> Optional[str]:
    return parse_payload(payload)[0]


def _first_choice(data: Any) -> Optional[dict]:
    if not isinstance(data, dict):
        return None
    choices = data.get("choices")
    if not isinstance(choices, list) or not choices:
        return None
    first = choices[0]
    return first if isinstance(first, dict) else None


def _delta_content(choice: dict) -> Optional[str]:
    delta = choice.get("delta")
    if not isinstance(delta, dict):
        return None
    content = delta.get("content")
    if content is None:
        return None
    if not isinstance(content, str):
        content = str(content)
    return content or None
