import pandas as pd
from datetime import datetime, date
from typing import Any, Optional

class FieldNormalizer:
    """Utility class for normalizing form and import field values."""

    DATE_FORMATS = [
        "%Y-%m-%d", "%d-%m-%Y", "%Y/%m/%d", "%d/%m/%Y",
        "%m/%d/%Y", "%d.%m.%Y", "%Y.%m.%d"
    ]

    @staticmethod
    def _is_missing(val: Any) -> bool:
        try:
            return val is None or bool(pd.isna(val))
        except (TypeError, ValueError):
            return False

    @classmethod
    def normalize_string(cls, val: Any) -> str:
        """Normalize string fields for consistency."""
        if cls._is_missing(val) or str(val).strip().lower() in ["", "nan", "null", "none"]:
            return ""
        return str(val).strip()

    @classmethod
    def parse_date(cls, val: Any, default_date: Optional[date] = None) -> Optional[date]:
        """Parse date with multiple format support."""
        if isinstance(val, datetime):
            return val.date()
        if isinstance(val, date):
            return val
        if cls._is_missing(val):
            return default_date

        val_str = str(val).strip()

        for fmt in cls.DATE_FORMATS:
            try:
                return datetime.strptime(val_str, fmt).date()
            except (ValueError, TypeError):
                continue

        # Fallback to pandas flexible parsing
        parsed_date = pd.to_datetime(val_str, errors='coerce')
        return parsed_date.date() if not pd.isna(parsed_date) else default_date

    @classmethod
    def parse_numeric(cls, val: Any, default: float = 0.0) -> float:
        """Parse numeric value with fallback."""
        try:
            if cls._is_missing(val):
                return default
            return float(str(val).strip())
        except (ValueError, TypeError):
            return default

    @classmethod
    def parse_integer(cls, val: Any, default: int = 0) -> int:
        """Parse integer value with fallback."""
        try:
            if cls._is_missing(val):
                return default
            return int(float(str(val).strip()))  # Handle float strings
        except (ValueError, TypeError):
            return default
