from pathlib import Path
from typing import List, Optional

from cue_chat.config.settings import settings
from cue_chat.domain.exceptions import BusinessError
from cue_chat.infrastructure.logging.logger import logger


class FileRuleSource:
    """从 UTF-8 文本文件读取规则行；文件不存在时返回 None。"""

    def __init__(self, path: str | Path | None = None):
        raw = path or settings.rules_file
        self._path = Path(raw).expanduser().resolve() if raw else None

    @property
    def path(self) -> Optional[Path]:
        return self._path

    def load_rule_lines(self) -> Optional[List[str]]:
        if self._path is None or not self._path.exists():
            logger.info("Rule file not found", extra={"extra": {"path": str(self._path)}})
            return None
        try:
            text = self._path.read_text(encoding="utf-8-sig")
        except (OSError, UnicodeDecodeError) as e:
            raise BusinessError(code="STORE_READ_ERROR", message=str(e))
        return text.splitlines()
