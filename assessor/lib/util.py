import datetime
import typing as t
from collections.abc import Mapping

KT = t.TypeVar("KT")
VT = t.TypeVar("VT")
RecursiveMapping = VT | Mapping[KT, "RecursiveMapping[KT, VT]"]


def deep_update(
    d1: dict[KT, RecursiveMapping[KT, VT]], d2: Mapping[KT, RecursiveMapping[KT, VT]]
) -> dict[KT, RecursiveMapping[KT, VT]]:
    result = d1.copy()
    for k, v in d2.items():
        if isinstance(v, Mapping) and k in result and isinstance(result[k], Mapping):
            result[k] = deep_update(result[k], v)  # type: ignore
        else:
            result[k] = v
    return result


def utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


def ensure_utc(dt: datetime.datetime) -> datetime.datetime:
    """Attach UTC to naive datetimes, which SQLite hands back for timezone-aware columns"""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=datetime.timezone.utc)
    return dt
