"""规则匹配引擎。

匹配顺序是对外约定：按规则表顺序遍历规则，规则内按声明顺序遍历关键词，
第一个作为子串出现在（小写化后的）输入中的关键词立即胜出。
不打分、不做最长匹配、不要求词边界，因此 "hi" 也会命中 "this"。
"""

import logging

from cue_chat.domain.memory import normalize_utterance
from cue_chat.domain.models import MatchResult
from cue_chat.domain.rules import RuleStore
from cue_chat.infrastructure.logging.logger import logger


NO_MATCH = MatchResult()


class DialogueEngine:
    def __init__(self, store: RuleStore):
        self._store = store

    @property
    def store(self) -> RuleStore:
        return self._store

    def match(self, utterance: str) -> MatchResult:
        return match(utterance, self._store)

    def respond(self, utterance: str) -> str:
        """返回命中规则的回复，未命中时返回兜底回复。"""

        result = self.match(utterance)
        if result.matched:
            return result.rule.response
        return self._store.fallback_response


def match(utterance: str, store: RuleStore) -> MatchResult:
    msg = normalize_utterance(utterance)
    if not msg:
        return NO_MATCH
    for rule in store.rules:
        for keyword in rule.keywords:
            if keyword in msg:
                logger.log(logging.INFO, "Rule matched", extra={"extra": {"keyword": keyword}})
                return MatchResult(rule=rule, keyword=keyword)
    return NO_MATCH
