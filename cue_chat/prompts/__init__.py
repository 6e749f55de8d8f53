"""系统提示词加载工具。

按语言(locale) 从 prompts/<locale> 目录读取兜底对话使用的
system prompt 文本，用于构造 ChatMessage(role="system")。
"""

from pathlib import Path


PROMPTS_DIR = Path(__file__).resolve().parent


def load_system_prompt(name: str = "fallback_system", locale: str = "en") -> str:
    """根据名称和语言加载系统提示词文本，找不到对应语言时退回英文。"""

    fname = PROMPTS_DIR / locale / f"{name}.md"
    if not fname.exists():
        fname = PROMPTS_DIR / "en" / f"{name}.md"
    return fname.read_text(encoding="utf-8").strip()
