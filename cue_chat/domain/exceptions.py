"""统一业务异常模型。

所有跨模块抛出的业务级错误都应该继承自 BusinessError，
便于在 UI 层或宿主程序中做统一捕获与用户提示。

分类：
- EmptyInputError: 空白输入，在修改任何状态之前拒绝。
- BusyError: 上一次流式请求尚未结束时再次发送。
- TransportError 及其子类: 流式请求阶段的 HTTP/网络失败，
  通过回调交付，不会修改会话历史。
- ValidationError: 配置缺失等校验问题。

规则加载与流式解码阶段的异常（坏行、坏 JSON）在本地吞掉并记录日志，
不会出现在这里。
"""

from typing import Optional


class BusinessError(Exception):
    """业务异常基类。

    Attributes:
        code: 机器可读错误码（如 "BUSY"）。
        message: 用户可读错误信息。
        http_status: 映射到 HTTP 时可用的状态码，默认 400。
        extra: 其他补充字段（例如 provider、body 等）。
    """

    def __init__(self, code: str, message: str, http_status: int = 400, **extra):
        self.code = code
        self.message = message
        self.http_status = http_status
        self.extra = extra
        super().__init__(message)


class EmptyInputError(BusinessError):
    """用户输入为空或只包含空白字符。"""

    def __init__(self, message: str = "User message is empty.", **extra):
        super().__init__(code="EMPTY_INPUT", message=message, **extra)


class BusyError(BusinessError):
    """已有一个流式请求在进行中，拒绝新的发送。"""

    def __init__(self, message: str = "A streaming request is already in flight.", **extra):
        super().__init__(code="BUSY", message=message, http_status=409, **extra)


class TransportError(BusinessError):
    """流式请求失败的基类，携带状态码与已捕获的响应体。"""

    def __init__(
        self,
        code: str,
        message: str,
        http_status: int = 502,
        body: Optional[str] = None,
        **extra,
    ):
        super().__init__(code=code, message=message, http_status=http_status, **extra)
        self.body = body or ""

    def __str__(self) -> str:
        if self.body:
            return f"HTTP {self.http_status}: {self.message}\n{self.body}"
        return f"HTTP {self.http_status}: {self.message}"


class NetworkError(TransportError):
    """网络层错误，例如连接失败、超时、流中途断开等。"""

    def __init__(self, code: str = "NETWORK_ERROR", message: str = "", **extra):
        extra.setdefault("http_status", 0)
        super().__init__(code=code, message=message, **extra)


class ApiError(TransportError):
    """第三方 API 返回非 2xx/429 错误时抛出。"""


class RateLimitError(ApiError):
    """Provider 限流错误，由上层负责重试/退避策略。"""


class ValidationError(BusinessError):
    """参数或配置校验失败。"""
