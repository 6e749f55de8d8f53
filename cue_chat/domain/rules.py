"""关键词规则表。

规则源为纯文本，每行一条：

    [可选标签]kw1,kw2,kw3|回复文本

- 没有 ``|`` 的行直接忽略；
- 关键词段去掉开头的 ``[tag]`` 后按逗号拆分、去空白、转小写、丢弃空项；
- 关键词包含 ``fallback`` 时，该行回复覆盖兜底回复（最后一条生效），不参与匹配；
- 缺少回复或关键词的行跳过，不影响整体加载。

RuleStore 在启动时构建一次，之后只读。
"""

import logging
import re
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from cue_chat.config.settings import DEFAULT_FALLBACK_RESPONSE
from cue_chat.infrastructure.logging.logger import logger


SEPARATOR = "|"
FALLBACK_KEYWORD = "fallback"

_TAG_RE = re.compile(r"^\s*\[[^\]]*\]")

# 原始程序内置的网球教练规则表
_DEFAULT_RULE_LINES = (
    "[greeting]hello,hi,hey|Hello! How can I help you today?",
    "[tennis]serve|For a basic serve: toss the ball slightly in front, reach up, "
    "and snap your wrist through contact.",
    "[tennis]forehand|For a forehand: turn your shoulders, swing low to high, "
    "and follow through across your body.",
    "[tennis]backhand|For a backhand: prepare early, keep your non dominant hand "
    "guiding, and finish forward.",
    "[tennis]score,scoring|Tennis scoring goes: 15, 30, 40, game. At 40 40 it is deuce.",
    "[help]help,what can you do,commands|Try typing: hello, serve, forehand, backhand, score.",
)


@dataclass(frozen=True)
class Rule:
    keywords: Tuple[str, ...]
    response: str


@dataclass(frozen=True)
class RuleStore:
    """不可变的规则表，rules 的顺序即优先级。"""

    rules: Tuple[Rule, ...] = ()
    fallback_response: str = DEFAULT_FALLBACK_RESPONSE

    def __len__(self) -> int:
        return len(self.rules)


def default_rule_lines() -> List[str]:
    """返回内置规则表的文本行，格式与规则文件一致。"""

    return list(_DEFAULT_RULE_LINES)


def parse_keywords(segment: str) -> Tuple[str, ...]:
    """去掉开头的 [tag] 并规范化关键词列表。"""

    segment = _TAG_RE.sub("", segment, count=1)
    return tuple(kw.strip().lower() for kw in segment.split(",") if kw.strip())


def load_rule_store(
    lines: Optional[Iterable[str]],
    default_fallback: str = DEFAULT_FALLBACK_RESPONSE,
) -> RuleStore:
    """从规则文本行构建 RuleStore。

    lines 为 None 时返回空表，兜底回复取 default_fallback。
    """

    if lines is None:
        logger.info("No rule source, using empty rule store")
        return RuleStore(rules=(), fallback_response=default_fallback)

    rules: List[Rule] = []
    fallback = default_fallback
    skipped = 0
    for lineno, raw in enumerate(lines, start=1):
        if SEPARATOR not in raw:
            continue
        head, _, tail = raw.partition(SEPARATOR)
        keywords = parse_keywords(head)
        response = tail.strip()
        if not keywords or not response:
            skipped += 1
            _log(logging.DEBUG, "Skipped malformed rule line", lineno=lineno)
            continue
        if FALLBACK_KEYWORD in keywords:
            fallback = response
            continue
        rules.append(Rule(keywords=keywords, response=response))

    _log(logging.INFO, "Loaded rule store", rules=len(rules), skipped=skipped)
    return RuleStore(rules=tuple(rules), fallback_response=fallback)


def _log(level: int, msg: str, **fields) -> None:
    logger.log(level, msg, extra={"extra": fields})
