import os
from dataclasses import dataclass
from typing import Any, Dict, Optional

from dotenv import load_dotenv

load_dotenv()


def _as_bool(val: Optional[str], default: bool = False) -> bool:
    if val is None:
        return default
    return str(val).lower() in {"1", "true", "yes", "y", "on"}


def _as_int(val: Optional[str], default: int) -> int:
    if val is None or not str(val).strip():
        return default
    return int(val)


@dataclass
class Settings:
    store_path: str = "data/textgrab.db"
    locator_ttl_seconds: int = 604800  # 7 days
    max_length: int = 50000
    clean_formatting: bool = True
    include_header: bool = True
    show_notifications: bool = True
    usage_retention_days: int = 30
    debug: bool = False

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            store_path=os.environ.get("TEXTGRAB_STORE_PATH") or "data/textgrab.db",
            locator_ttl_seconds=_as_int(os.environ.get("TEXTGRAB_LOCATOR_TTL"), 604800),
            max_length=_as_int(os.environ.get("TEXTGRAB_MAX_LENGTH"), 50000),
            clean_formatting=_as_bool(os.environ.get("TEXTGRAB_CLEAN_FORMATTING"), True),
            include_header=_as_bool(os.environ.get("TEXTGRAB_INCLUDE_HEADER"), True),
            show_notifications=_as_bool(os.environ.get("TEXTGRAB_SHOW_NOTIFICATIONS"), True),
            usage_retention_days=_as_int(os.environ.get("TEXTGRAB_USAGE_RETENTION_DAYS"), 30),
            debug=_as_bool(os.environ.get("TEXTGRAB_DEBUG"), False),
        )

    def to_public_dict(self) -> Dict[str, Any]:
        """Settings surfaced to UI surfaces through the get-settings action."""
        return {
            "maxLength": self.max_length,
            "cleanFormatting": self.clean_formatting,
            "includeHeader": self.include_header,
            "showNotifications": self.show_notifications,
        }
