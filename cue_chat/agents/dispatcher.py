"""回复分发器。

把规则引擎、重复提问记忆、流式客户端与音效/动画选择串起来：

1. on_start(): 加载规则表与音效分组、重置会话、展示就绪提示。
2. on_submit(text):
   - 重复提问 → 固定的 "already asked" 回复，不再匹配也不调用远端；
   - 命中规则 → 同步返回规则回复，意图键为命中的关键词；
   - 未命中 → 交给 StreamingChatClient，成功后以 "fallback" 意图输出完整文本，
     失败时输出规则表中的兜底回复。

宿主的按键轮询、生命周期回调都在外部，这里只暴露这两个入口。
"""

import logging
import time
from typing import Any, Callable, Dict, Optional
from uuid import uuid4

from cue_chat.agents.dialogue_engine import DialogueEngine
from cue_chat.agents.modality import ModalitySelector
from cue_chat.config.settings import settings
from cue_chat.domain.conversation import Transcript
from cue_chat.domain.exceptions import BusinessError, BusyError
from cue_chat.domain.memory import QuestionMemory
from cue_chat.domain.models import ALREADY_ASKED_INTENT, FALLBACK_INTENT, DispatchResult
from cue_chat.domain.rules import RuleStore, default_rule_lines, load_rule_store
from cue_chat.infrastructure.logging.logger import logger
from cue_chat.providers.base import AudioGroupSource, MessageRenderer, RuleSource
from cue_chat.providers.streaming_client import StreamingChatClient


ResultCallback = Callable[[DispatchResult], None]


class ResponseDispatcher:
    def __init__(
        self,
        client: Optional[StreamingChatClient] = None,
        rule_source: Optional[RuleSource] = None,
        selector: Optional[ModalitySelector] = None,
        renderer: Optional[MessageRenderer] = None,
        on_delta: Optional[Callable[[str], None]] = None,
        on_result: Optional[ResultCallback] = None,
        cfg=settings,
        audio_source: Optional[AudioGroupSource] = None,
    ):
        self._client = client
        self._rule_source = rule_source
        self._audio_source = audio_source
        self._selector = selector or ModalitySelector()
        self._renderer = renderer
        self._on_delta = on_delta
        self._on_result = on_result
        self._settings = cfg
        self._memory = QuestionMemory()
        self._transcript = Transcript(getattr(cfg, "max_transcript_messages", 25))
        self._engine = DialogueEngine(RuleStore(fallback_response=self._fallback_default()))

    # ---- 只读状态 ----

    @property
    def rule_store(self) -> RuleStore:
        return self._engine.store

    @property
    def memory(self) -> QuestionMemory:
        return self._memory

    @property
    def transcript(self) -> Transcript:
        return self._transcript

    @property
    def client(self) -> Optional[StreamingChatClient]:
        return self._client

    # ---- 入口 ----

    def on_start(self) -> RuleStore:
        """加载规则表与音效分组，并重置会话。"""

        if self._rule_source is not None:
            lines = self._rule_source.load_rule_lines()
        else:
            lines = default_rule_lines()
        store = load_rule_store(lines, default_fallback=self._fallback_default())
        self._engine = DialogueEngine(store)
        if self._audio_source is not None:
            self._selector.use_audio_groups(self._audio_source.load_audio_groups())
        if self._client is not None:
            self._client.reset_conversation()
        ready = getattr(self._settings, "ready_message", "")
        if ready:
            self._render(ready, "bot")
        self._log(logging.INFO, "Dispatcher started", rules=len(store), audio_groups=len(self._selector.audio.groups))
        return store

    def on_submit(self, text: str) -> Optional[DispatchResult]:
        """处理一次用户提交。

        空白输入直接忽略并返回 None。流式请求在后台进行时返回 None，
        结果稍后通过 on_result 回调交付。

        Raises:
            BusyError: 上一轮兜底流式请求尚未结束。
        """

        if not text or not text.strip():
            return None
        if self._client is not None and self._client.busy:
            raise BusyError()

        trace_id = f"tr-{uuid4().hex}"
        self._render(text, "user")

        if self._memory.accept(text):
            self._log(logging.INFO, "Repeated question", trace_id=trace_id)
            return self._emit(
                DispatchResult(
                    text=getattr(self._settings, "already_asked_response", ""),
                    intent_key=ALREADY_ASKED_INTENT,
                    source="memory",
                )
            )

        result = self._engine.match(text)
        if result.matched:
            return self._emit(DispatchResult(text=result.rule.response, intent_key=result.keyword, source="rule"))

        return self._delegate(text, trace_id)

    # ---- 兜底流式路径 ----

    def _delegate(self, text: str, trace_id: str) -> Optional[DispatchResult]:
        if self._client is None:
            return self._emit(self._fallback_result({"reason": "no_client"}))

        start = time.time()
        box: Dict[str, DispatchResult] = {}

        def done(full_text: str) -> None:
            self._log(
                logging.INFO,
                "Fallback stream answered",
                trace_id=trace_id,
                elapsed_seconds=round(time.time() - start, 2),
            )
            box["result"] = self._emit(DispatchResult(text=full_text, intent_key=FALLBACK_INTENT, source="stream"))

        def failed(err: BusinessError) -> None:
            self._log(logging.WARNING, "Fallback stream failed", trace_id=trace_id, code=err.code)
            box["result"] = self._emit(self._fallback_result({"error": err.code, "http_status": err.http_status}))

        if getattr(self._settings, "stream_in_background", False):
            self._client.send_in_background(text, on_delta=self._on_delta, on_done=done, on_error=failed)
            return None
        self._client.send(text, on_delta=self._on_delta, on_done=done, on_error=failed)
        return box.get("result")

    def _fallback_result(self, meta: Dict[str, Any]) -> DispatchResult:
        return DispatchResult(
            text=self._engine.store.fallback_response,
            intent_key=FALLBACK_INTENT,
            source="fallback",
            meta=meta,
        )

    # ---- 输出 ----

    def _emit(self, result: DispatchResult) -> DispatchResult:
        self._render(result.text, "bot")
        self._selector.apply(result.intent_key)
        if self._on_result is not None:
            self._on_result(result)
        return result

    def _render(self, text: str, role: str) -> None:
        self._transcript.add(text, role)
        if self._renderer is not None:
            self._renderer.render_message(text, role)

    def _fallback_default(self) -> str:
        return getattr(self._settings, "fallback_response", None) or RuleStore().fallback_response

    def _log(self, level: int, msg: str, **fields) -> None:
        logger.log(level, msg, extra={"extra": fields})
