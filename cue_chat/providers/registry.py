"""Provider 与模型配置。

本模块将“逻辑模型名”与“具体厂商模型名”解耦：

- 逻辑名（logical_name）：在代码里使用的统一名称，例如 "chat-fallback"。
- provider_model：厂商实际提供的模型 ID，例如 "llama3.1:latest"。

上层只关心逻辑名，具体用哪个底层模型由这里集中配置，便于后续升级或切换。"""

from dataclasses import dataclass
from typing import Dict, Mapping


@dataclass
class ModelConfig:
    """单个逻辑模型的配置。"""

    logical_name: str
    provider_model: str


@dataclass
class ProviderConfig:
    """某个 Provider 的整体配置。"""

    name: str
    base_url: str
    models: Dict[str, ModelConfig]
    chat_path: str = "/chat/completions"

    def chat_url(self, base_url: str | None = None) -> str:
        return f"{(base_url or self.base_url).rstrip('/')}{self.chat_path}"

    def resolve_model(self, logical_name: str) -> str:
        """逻辑名未登记时原样返回，便于直接填写厂商模型 ID。"""

        cfg = self.models.get(logical_name)
        return cfg.provider_model if cfg else logical_name


# Purdue RCAC GenAI Studio（OpenAI 兼容接口）
RCAC_CONFIG = ProviderConfig(
    name="rcac",
    base_url="https://genai.rcac.purdue.edu/api",
    models={
        "chat-fallback": ModelConfig(
            logical_name="chat-fallback",
            provider_model="llama3.1:latest",
        )
    },
)


PROVIDER_REGISTRY: Mapping[str, ProviderConfig] = {
    "rcac": RCAC_CONFIG,
}


def get_provider_config(name: str) -> ProviderConfig:
    """根据名称获取 ProviderConfig，名称不区分大小写。"""

    key = name.lower()
    for k, cfg in PROVIDER_REGISTRY.items():
        if k.lower() == key:
            return cfg
    raise KeyError(f"Unknown provider: {name!r}")
