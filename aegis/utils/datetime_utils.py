from datetime import date, datetime, timedelta
from typing import List, Optional

import pytz

from aegis.config import config

def now_local(tz_name: Optional[str] = None) -> datetime:
    tz = pytz.timezone(tz_name) if tz_name else config.rules.tzinfo
    return datetime.now(tz)

def today(tz_name: Optional[str] = None) -> date:
    return now_local(tz_name).date()

def now_millis() -> int:
    return int(datetime.now(pytz.utc).timestamp() * 1000)

def parse_date(date_str: Optional[str], fmt: str = "%Y-%m-%d") -> Optional[date]:
    # Битые даты в данных трактуются как отсутствующие
    if not date_str or not isinstance(date_str, str):
        return None
    try:
        return datetime.strptime(date_str, fmt).date()
    except ValueError:
        return None

def weekday_index(day: date) -> int:
    """Номер дня недели: 0 = воскресенье ... 6 = суббота"""
    return (day.weekday() + 1) % 7

def most_recent_sunday(day: date) -> date:
    return day - timedelta(days=weekday_index(day))

def last_n_days(day: date, n: int) -> List[date]:
    """Последние n дней, начиная с day и назад"""
    return [day - timedelta(days=i) for i in range(n)]
