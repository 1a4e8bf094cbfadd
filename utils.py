from datetime import datetime, timedelta
from typing import List, Tuple, Type, TypeVar
import pytz
from pydantic import BaseModel
from config import UTC_OFFSET_HOURS, WEEK_DAYS

T = TypeVar("T", bound=BaseModel)

# fixed UTC+6, no DST
tracker_tz = pytz.FixedOffset(UTC_OFFSET_HOURS * 60)
DATE_FORMAT = "%Y-%m-%d"

def dict_to_model(model_cls: Type[T], data: dict) -> T:
    valid_keys = set(model_cls.model_fields.keys())
    filtered = {k: v for k, v in data.items() if k in valid_keys}
    return model_cls(**filtered)

def to_date_string(timestamp: float) -> str:
    return datetime.fromtimestamp(timestamp, tz=tracker_tz).strftime(DATE_FORMAT)

def target_date(now: float, day_offset: int = 0) -> str:
    if day_offset < 0:
        raise ValueError(f"day_offset must be non-negative, got {day_offset}")
    shifted = datetime.fromtimestamp(now, tz=tracker_tz) - timedelta(days=day_offset)
    return shifted.strftime(DATE_FORMAT)

def shift_date(date_str: str, days: int) -> str:
    day = datetime.strptime(date_str, DATE_FORMAT).date()
    return (day + timedelta(days=days)).strftime(DATE_FORMAT)

def day_window(end_date: str, days: int = WEEK_DAYS) -> List[str]:
    """The `days` calendar dates ending at `end_date`, newest first."""
    return [shift_date(end_date, -i) for i in range(days)]

def load_users(file: str) -> Tuple[List[str], List[str]]:
    with open(file, "r", encoding="utf-8") as f:
        lines = [line.strip() for line in f if line.strip() and not line.startswith("#")]
    real_names = []
    handles = []
    for line in lines:
        parts = [part.strip() for part in line.split(',')]
        handles.append(parts[-1])
        real_names.append(parts[0] if len(parts) >= 2 else parts[-1])
    return real_names, handles
