# apps/core/domain/dates.py
from datetime import date, datetime, timedelta
from typing import Optional, Union

import pytz
from dateutil.parser import isoparse

DateLike = Union[str, date, datetime]

DAY_KEY_FORMAT = '%Y-%m-%d'


def day_key(value: DateLike) -> str:
    """
    Sprowadza dowolną reprezentację daty do klucza dnia YYYY-MM-DD.

    Magazyn potrafi odesłać "2024-01-15 00:00:00.000Z" mimo że zapisaliśmy
    samo "2024-01-15", więc każde porównanie dat idzie przez tę funkcję.
    Część czasu (i strefa) jest odcinana, a nie przeliczana.
    """
    if isinstance(value, datetime):
        return value.date().strftime(DAY_KEY_FORMAT)
    if isinstance(value, date):
        return value.strftime(DAY_KEY_FORMAT)

    text = str(value).strip()
    if not text:
        raise ValueError("Empty date value")

    return isoparse(text).date().strftime(DAY_KEY_FORMAT)


def next_day_key(value: DateLike) -> str:
    """Klucz dnia następnego (górna, otwarta granica zakresu)."""
    current = datetime.strptime(day_key(value), DAY_KEY_FORMAT).date()
    return (current + timedelta(days=1)).strftime(DAY_KEY_FORMAT)


def today_key(tz_name: Optional[str] = None) -> str:
    """Dzisiejszy klucz dnia w podanej strefie czasowej (domyślnie UTC)."""
    tz = pytz.timezone(tz_name) if tz_name else pytz.UTC
    return datetime.now(tz).strftime(DAY_KEY_FORMAT)
