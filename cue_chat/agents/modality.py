"""意图键 → 音效 / 动画 的映射。

- 音效：音效资源按文件名前缀（第一个 "_" 之前的部分）分组，意图键直接作为组名查找，
  找不到时使用 "fallback" 组；组内具体播放哪一条交给 pick 协作者（默认随机）。
- 动画：按意图键中的子串分类——hello/hi/hey 为问候，bye/thanks 为告别，其余为通用成功；
  "fallback" 意图固定使用专门的触发器。动画控制器上不存在的触发器降级为通用成功触发器。
"""

import random
from dataclasses import dataclass, field
from pathlib import PurePath
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence

from cue_chat.domain.models import FALLBACK_INTENT
from cue_chat.infrastructure.logging.logger import logger
from cue_chat.providers.base import Animator, AudioPlayer


GREETING_MARKERS = ("hello", "hi", "hey")
FAREWELL_MARKERS = ("bye", "thanks")


def asset_group_key(name: str) -> str:
    """资源名前缀：去掉扩展名后取第一个 "_" 之前的部分，统一小写。"""

    stem = PurePath(name).stem
    return stem.split("_", 1)[0].lower()


def group_assets_by_prefix(
    assets: Iterable[Any],
    name_of: Callable[[Any], str] = str,
) -> Dict[str, List[Any]]:
    groups: Dict[str, List[Any]] = {}
    for asset in assets:
        groups.setdefault(asset_group_key(name_of(asset)), []).append(asset)
    return groups


@dataclass
class AudioConfig:
    groups: Mapping[str, Sequence[Any]] = field(default_factory=dict)
    fallback_group: str = FALLBACK_INTENT

    def group_for(self, intent_key: str) -> Optional[str]:
        """返回实际使用的组名，连 fallback 组都没有时返回 None。"""

        if self.groups.get(intent_key):
            return intent_key
        if self.groups.get(self.fallback_group):
            return self.fallback_group
        return None


@dataclass
class AnimationConfig:
    greeting_trigger: str = "Greet"
    farewell_trigger: str = "Wave"
    success_trigger: str = "Success"
    fallback_trigger: str = "Think"

    def trigger_for(self, intent_key: str) -> str:
        key = (intent_key or "").lower()
        if key == FALLBACK_INTENT:
            return self.fallback_trigger
        if any(marker in key for marker in GREETING_MARKERS):
            return self.greeting_trigger
        if any(marker in key for marker in FAREWELL_MARKERS):
            return self.farewell_trigger
        return self.success_trigger


@dataclass
class ModalityCue:
    intent_key: str
    audio_group: Optional[str] = None
    audio: Any = None
    trigger: Optional[str] = None


class ModalitySelector:
    def __init__(
        self,
        audio: Optional[AudioConfig] = None,
        animation: Optional[AnimationConfig] = None,
        player: Optional[AudioPlayer] = None,
        animator: Optional[Animator] = None,
        pick: Callable[[Sequence[Any]], Any] = random.choice,
    ):
        self._audio = audio or AudioConfig()
        self._animation = animation or AnimationConfig()
        self._player = player
        self._animator = animator
        self._pick = pick

    @property
    def audio(self) -> AudioConfig:
        return self._audio

    def use_audio_groups(self, groups: Optional[Mapping[str, Sequence[Any]]]) -> None:
        """替换音效分组。组名统一小写，与规范化后的意图键比较。"""

        self._audio = AudioConfig(
            groups={str(key).lower(): list(clips) for key, clips in (groups or {}).items()},
            fallback_group=self._audio.fallback_group,
        )

    def select_trigger(self, intent_key: str) -> Optional[str]:
        trigger = self._animation.trigger_for(intent_key)
        if self._animator is None or self._animator.has_trigger(trigger):
            return trigger
        success = self._animation.success_trigger
        if self._animator.has_trigger(success):
            return success
        return None

    def select_audio(self, intent_key: str) -> ModalityCue:
        group = self._audio.group_for(intent_key)
        clip = self._pick(list(self._audio.groups[group])) if group else None
        return ModalityCue(intent_key=intent_key, audio_group=group, audio=clip)

    def apply(self, intent_key: str) -> ModalityCue:
        """选出音效与动画并交给协作者播放。"""

        cue = self.select_audio(intent_key)
        cue.trigger = self.select_trigger(intent_key)
        if cue.audio is not None and self._player is not None:
            self._player.play(cue.audio)
        if cue.trigger and self._animator is not None:
            self._animator.fire_trigger(cue.trigger)
        logger.info(
            "Modality selected",
            extra={"extra": {"intent": intent_key, "audio_group": cue.audio_group, "trigger": cue.trigger}},
        )
        return cue
