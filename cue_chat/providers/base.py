"""外部协作者接口。

分发器不直接依赖宿主程序（游戏引擎、GUI、音频库），而是依赖这些协议：

- RuleSource: 提供规则表文本行。
- AudioGroupSource: 提供按前缀分组的音效句柄。
- AudioPlayer / Animator: 播放音效、触发动画。
- MessageRenderer: 把消息渲染到界面。

宿主只需实现对应方法即可接入，本包内只提供文件规则源一种实现。
"""

from typing import Any, Mapping, Optional, Protocol, Sequence


class RuleSource(Protocol):
    def load_rule_lines(self) -> Optional[Sequence[str]]:
        """返回规则文本行；源不存在时返回 None。"""

        ...


class AudioGroupSource(Protocol):
    def load_audio_groups(self) -> Mapping[str, Sequence[Any]]:
        """返回 组名 → 音效句柄列表；宿主可用 group_assets_by_prefix 从资源列表生成。"""

        ...


class AudioPlayer(Protocol):
    def play(self, handle: Any) -> None:
        ...


class Animator(Protocol):
    def has_trigger(self, name: str) -> bool:
        ...

    def fire_trigger(self, name: str) -> None:
        ...


class MessageRenderer(Protocol):
    def render_message(self, text: str, role: str) -> None:
        ...
