"""JSON helpers for values the standard encoder rejects.

Used for JSON document columns, log `extra` payloads and prompt templates.
"""

from __future__ import annotations

import datetime
import enum
import functools
import json as pyjson
import pathlib
import typing as t

import pydantic as p

JSONPrimitive = str | int | float | bool | None
JSONValue = JSONPrimitive | list["JSONValue"] | dict[str, "JSONValue"]


@functools.singledispatch
def encode(obj: t.Any) -> JSONValue:
    raise TypeError(f"Object of type {obj.__class__.__name__} is not JSON serializable")


@encode.register
def _(obj: p.BaseModel) -> JSONValue:
    return obj.model_dump(mode="json")


@encode.register
def _(obj: datetime.date) -> JSONValue:
    # also covers datetime.datetime
    return obj.isoformat()


@encode.register
def _(obj: datetime.timedelta) -> JSONValue:
    return obj.total_seconds()


@encode.register
def _(obj: enum.Enum) -> JSONValue:
    return obj.value


@encode.register(set)
@encode.register(frozenset)
def _(obj: t.Iterable[t.Any]) -> JSONValue:
    return list(obj)


@encode.register
def _(obj: pathlib.PurePath) -> JSONValue:
    return str(obj)


class JSONEncoder(pyjson.JSONEncoder):
    def default(self, o: t.Any) -> JSONValue:
        try:
            return encode(o)
        except TypeError:
            return pyjson.JSONEncoder.default(self, o)


def dumps(obj: t.Any, *, cls: type[pyjson.JSONEncoder] = JSONEncoder, **kwargs: t.Any) -> str:
    return pyjson.dumps(obj, cls=cls, **kwargs)


def loads(s: str | bytes | bytearray, **kwargs: t.Any) -> JSONValue:
    return pyjson.loads(s, **kwargs)
