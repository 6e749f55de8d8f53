"""GenAI 流式对话客户端。

本模块负责：

1. 维护有序的会话历史（system 只在每个 reset 周期的第一轮插入一次）。
2. 每轮发起一次 ``stream: true`` 的 chat/completions 请求。
3. 把 SSE 响应增量解码为文本片段，按到达顺序回调给调用方。
4. 结束时给出且只给出一次终态通知：成功（完整文本）或失败（TransportError）。

状态机：IDLE → SENDING → STREAMING → {COMPLETED | FAILED} → IDLE。
同一时刻只允许一个在途请求，重入的 send 会收到 BusyError。
失败时会话历史保持 send 之前的样子，不会写入半截的助手回复。
"""

import logging
import threading
from typing import Any, Callable, Dict, List, Optional, Tuple

import httpx

from cue_chat.config.settings import settings
from cue_chat.domain.conversation import ConversationHistory
from cue_chat.domain.exceptions import (
    ApiError,
    BusinessError,
    BusyError,
    EmptyInputError,
    NetworkError,
    RateLimitError,
    ValidationError,
)
from cue_chat.domain.models import ChatMessage, ChatRequest, ClientState, StreamOutcome
from cue_chat.infrastructure.logging.logger import logger
from cue_chat.providers.registry import ProviderConfig, get_provider_config
from cue_chat.providers.sse import SseDecoder, parse_payload


DeltaCallback = Callable[[str], None]
DoneCallback = Callable[[str], None]
ErrorCallback = Callable[[BusinessError], None]


class StreamingChatClient:
    """单会话的流式客户端。

    - system_prompt: 管理员指令，为空则不插入 system 消息。
    - model: 逻辑模型名，默认取配置中的 default_model。
    """

    def __init__(
        self,
        cfg=settings,
        system_prompt: Optional[str] = None,
        model: Optional[str] = None,
        provider: Optional[ProviderConfig] = None,
    ):
        self._settings = cfg
        self._provider = provider or get_provider_config(getattr(cfg, "default_provider", "rcac"))
        self._model = model or getattr(cfg, "default_model", "chat-fallback")
        self._system_prompt = system_prompt
        self.name = self._provider.name

        self._lock = threading.Lock()
        self._history = ConversationHistory()
        self._state = ClientState.IDLE
        self._in_flight = False
        self._last_state: Optional[ClientState] = None
        self._accumulator: List[str] = []
        # reset_conversation 时递增，在途请求据此判断结果是否还能写回历史
        self._generation = 0

    # ---- 只读状态 ----

    @property
    def messages(self) -> Tuple[ChatMessage, ...]:
        with self._lock:
            return self._history.messages

    @property
    def state(self) -> ClientState:
        return self._state

    @property
    def last_terminal_state(self) -> Optional[ClientState]:
        """最近一次请求的终态（COMPLETED / FAILED），尚未发送过时为 None。"""

        return self._last_state

    @property
    def busy(self) -> bool:
        return self._in_flight

    @property
    def pending_text(self) -> str:
        """当前（或最近一次）请求已累积的文本。"""

        return "".join(self._accumulator)

    @property
    def system_prompt(self) -> Optional[str]:
        return self._system_prompt

    # ---- 会话操作 ----

    def reset_conversation(self) -> None:
        """清空历史；下一次 send 会重新插入 system 消息。"""

        with self._lock:
            self._history.clear()
            self._generation += 1
        self._log(logging.INFO, "Conversation reset", generation=self._generation)

    def send(
        self,
        user_text: str,
        on_delta: Optional[DeltaCallback] = None,
        on_done: Optional[DoneCallback] = None,
        on_error: Optional[ErrorCallback] = None,
    ) -> StreamOutcome:
        """在当前线程执行一轮流式对话，返回终态结果。

        Raises:
            EmptyInputError: 输入为空白，不修改任何状态。
            BusyError: 上一轮尚未给出终态通知。
        """

        staged, generation = self._begin(user_text)
        return self._run(staged, generation, on_delta, on_done, on_error)

    def send_in_background(
        self,
        user_text: str,
        on_delta: Optional[DeltaCallback] = None,
        on_done: Optional[DoneCallback] = None,
        on_error: Optional[ErrorCallback] = None,
    ) -> threading.Thread:
        """与 send 相同，但网络部分在后台线程执行。

        空输入与重入检查在调用线程完成，因此异常会直接抛给调用方。
        """

        staged, generation = self._begin(user_text)
        worker = threading.Thread(
            target=self._run,
            args=(staged, generation, on_delta, on_done, on_error),
            name="cue-chat-stream",
            daemon=True,
        )
        worker.start()
        return worker

    # ---- 内部流程 ----

    def _begin(self, user_text: str) -> Tuple[List[ChatMessage], int]:
        if not user_text or not user_text.strip():
            raise EmptyInputError()
        with self._lock:
            if self._in_flight:
                raise BusyError()
            self._in_flight = True
            self._state = ClientState.SENDING
            self._accumulator = []
            staged = self._history.stage_turn(self._system_prompt, user_text)
            return staged, self._generation

    def _run(
        self,
        staged: List[ChatMessage],
        generation: int,
        on_delta: Optional[DeltaCallback],
        on_done: Optional[DoneCallback],
        on_error: Optional[ErrorCallback],
    ) -> StreamOutcome:
        request = ChatRequest(model=self._model, messages=staged)
        log_ctx: Dict[str, Any] = {"provider": self.name, "model": self._model, "messages": len(staged)}
        self._log(logging.INFO, "Stream started", log_ctx)
        finished = False
        try:
            try:
                text = self._stream(request, on_delta)
            except BusinessError as err:
                outcome = self._fail(err, log_ctx)
                finished = True
                if on_error:
                    on_error(err)
                return outcome
            outcome = self._complete(staged, generation, text, log_ctx)
            finished = True
            if on_done:
                on_done(text)
            return outcome
        finally:
            # 回调抛出的异常同样不能让客户端卡在在途状态
            if not finished:
                with self._lock:
                    self._in_flight = False
                    self._state = ClientState.IDLE

    def _complete(
        self,
        staged: List[ChatMessage],
        generation: int,
        text: str,
        log_ctx: Dict[str, Any],
    ) -> StreamOutcome:
        with self._lock:
            if generation == self._generation:
                self._history.commit_turn(staged, text)
            else:
                self._log(logging.INFO, "Discarded reply of a reset conversation", log_ctx)
            self._last_state = ClientState.COMPLETED
            self._in_flight = False
            self._state = ClientState.IDLE
        self._log(logging.INFO, "Stream completed", log_ctx, chars=len(text))
        return StreamOutcome(ok=True, text=text)

    def _fail(self, err: BusinessError, log_ctx: Dict[str, Any]) -> StreamOutcome:
        with self._lock:
            self._last_state = ClientState.FAILED
            self._in_flight = False
            self._state = ClientState.IDLE
        self._log(
            logging.WARNING,
            "Stream failed",
            log_ctx,
            code=err.code,
            http_status=err.http_status,
        )
        return StreamOutcome(ok=False, text=self.pending_text, error=err)

    def _stream(self, req: ChatRequest, on_delta: Optional[DeltaCallback]) -> str:
        """发起请求并消费 SSE 流，返回完整文本；失败时抛出 BusinessError。"""

        api_key = getattr(self._settings, "genai_api_key", None)
        if not api_key:
            raise ValidationError(code="MISSING_API_KEY", message="GENAI_API_KEY not set")
        payload = self._build_payload(req)
        base = getattr(self._settings, "genai_base_url", None)
        url = self._provider.chat_url(base)
        terminal = False
        try:
            with httpx.Client(timeout=self._settings.http_timeout, trust_env=False) as client:
                with client.stream(
                    "POST",
                    url,
                    json=payload,
                    headers={
                        "Authorization": f"Bearer {api_key}",
                        "Content-Type": "application/json",
                        "Accept": "text/event-stream",
                    },
                ) as resp:
                    if resp.status_code == 429:
                        raise RateLimitError(
                            code="RATE_LIMIT",
                            message="GenAI rate limit",
                            http_status=429,
                            body=self._read_body(resp),
                        )
                    if resp.status_code >= 400:
                        raise ApiError(
                            code="API_ERROR",
                            message=f"GenAI request failed with status {resp.status_code}",
                            http_status=resp.status_code,
                            body=self._read_body(resp),
                        )
                    with self._lock:
                        self._state = ClientState.STREAMING
                    decoder = SseDecoder()
                    for chunk in resp.iter_bytes():
                        terminal = self._consume(decoder.feed(chunk), on_delta) or terminal
                    # 最后一块可能没有以空行结尾
                    terminal = self._consume(decoder.flush(), on_delta) or terminal
        except (httpx.RequestError, httpx.StreamError) as e:
            raise NetworkError(message=str(e) or e.__class__.__name__, body=self.pending_text)
        if not terminal:
            raise NetworkError(
                code="STREAM_INCOMPLETE",
                message="Stream ended before a terminal frame",
                body=self.pending_text,
            )
        return self.pending_text

    def _consume(self, payloads: List[str], on_delta: Optional[DeltaCallback]) -> bool:
        """累积并回调增量，返回其中是否出现终止帧。"""

        terminal = False
        for data in payloads:
            delta, done = parse_payload(data)
            terminal = terminal or done
            if delta:
                self._accumulator.append(delta)
                if on_delta:
                    on_delta(delta)
        return terminal

    def _build_payload(self, req: ChatRequest) -> dict:
        return {
            "model": self._provider.resolve_model(req.model),
            "stream": req.stream,
            "messages": [m.to_payload() for m in req.messages],
        }

    @staticmethod
    def _read_body(resp) -> str:
        try:
            resp.read()
            return resp.text or ""
        except (httpx.HTTPError, httpx.StreamError, UnicodeDecodeError):
            return ""

    def _log(self, level: int, msg: str, ctx: Optional[Dict[str, Any]] = None, **fields) -> None:
        extra = dict(ctx or {})
        extra.update(fields)
        logger.log(level, msg, extra={"extra": extra})
