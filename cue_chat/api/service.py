"""对外 API 服务模块。

提供简化的函数接口供宿主程序调用：启动时调用 start()，
每次用户提交调用 submit(text)。
"""

from typing import Any, Dict, List, Optional

from cue_chat.agents.dispatcher import ResponseDispatcher
from cue_chat.config.settings import settings
from cue_chat.infrastructure.logging.logger import logger
from cue_chat.infrastructure.storage.rule_file import FileRuleSource
from cue_chat.providers import create_client


_dispatcher: Optional[ResponseDispatcher] = None


def get_default_dispatcher() -> ResponseDispatcher:
    """获取默认的分发器实例（单例）。"""
    global _dispatcher
    if _dispatcher is None:
        rule_source = FileRuleSource(settings.rules_file) if settings.rules_file else None
        _dispatcher = ResponseDispatcher(
            client=create_client(),
            rule_source=rule_source,
        )
    return _dispatcher


def start() -> Dict[str, Any]:
    """加载规则表并重置会话。

    Returns:
        包含规则数量与兜底回复的字典
    """
    store = get_default_dispatcher().on_start()
    return {"rules": len(store), "fallback_response": store.fallback_response}


def submit(text: str) -> Optional[Dict[str, Any]]:
    """处理一次用户输入。

    Args:
        text: 用户输入内容

    Returns:
        包含回复文本、意图键与来源的字典；空输入或后台流式请求时返回 None

    Raises:
        各种 domain.exceptions 中定义的异常
    """
    try:
        result = get_default_dispatcher().on_submit(text)
    except Exception as e:
        logger.error(f"Submit failed: {e}", extra={"extra": {"error": str(e)}})
        raise
    if result is None:
        return None
    return {
        "text": result.text,
        "intent_key": result.intent_key,
        "source": result.source,
        "meta": result.meta,
    }


def get_transcript() -> List[Dict[str, Any]]:
    """获取界面消息记录（最近若干条）。"""
    return [{"text": e.text, "role": e.role} for e in get_default_dispatcher().transcript.entries]


def get_conversation_messages() -> List[Dict[str, Any]]:
    """获取发给远端模型的会话历史。"""
    client = get_default_dispatcher().client
    if client is None:
        return []
    return [m.to_payload() for m in client.messages]
