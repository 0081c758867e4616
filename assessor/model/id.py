"""Prefixed shortuuid identifiers, e.g. `user$3WbQG9bGwFzzYAMzTDW7tD`.

Only the 22-character shortuuid is stored in key columns; the prefix says
which kind of entity a key refers to and is restored on load.
"""

from __future__ import annotations

import typing as t

import pydantic as p
import pydantic_core.core_schema as core_schema
import shortuuid

KEY_LENGTH = 22
SEPARATOR = "$"


class ShortUUIDKey(str):
    prefix: t.ClassVar[str]

    def __init_subclass__(cls, prefix: str, **kwargs: t.Any):
        super().__init_subclass__(**kwargs)
        if len(prefix) != 4:
            raise ValueError(f"key prefix must have length 4, got {prefix!r}")
        cls.prefix = prefix

    def __new__(cls, value: str | None = None, /) -> t.Self:
        """A new random key, or `value` checked against this key type"""
        if value is None:
            return cls.from_key(shortuuid.uuid())

        head, sep, key = value.partition(SEPARATOR)
        if head != cls.prefix or not sep:
            raise ValueError(f"invalid {cls.__name__}: key must begin with {cls.prefix}{SEPARATOR}")
        if len(key) != KEY_LENGTH:
            raise ValueError(f"invalid {cls.__name__}: key must have length {KEY_LENGTH}")
        alphabet = shortuuid.get_alphabet()
        if not all(c in alphabet for c in key):
            raise ValueError(f"invalid {cls.__name__}: key must comprise only {alphabet}")
        return super().__new__(cls, value)

    @classmethod
    def from_key(cls, key: str) -> t.Self:
        """Re-attach the prefix to a stored key; the key is trusted"""
        return str.__new__(cls, f"{cls.prefix}{SEPARATOR}{key}")

    @property
    def key(self) -> str:
        return self[len(self.prefix) + len(SEPARATOR) :]

    def __hash__(self) -> int:
        return str.__hash__(self)

    def __str__(self) -> str:
        return str.__str__(self)

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self.key}>"

    @classmethod
    def __get_pydantic_core_schema__(cls, src: t.Any, handler: p.GetCoreSchemaHandler) -> core_schema.CoreSchema:
        from_str = core_schema.no_info_after_validator_function(cls, core_schema.str_schema())
        return core_schema.json_or_python_schema(
            json_schema=from_str,
            python_schema=core_schema.union_schema([core_schema.is_instance_schema(cls), from_str]),
            serialization=core_schema.plain_serializer_function_ser_schema(str.__str__),
        )

    @classmethod
    def __get_pydantic_json_schema__(
        cls, schema: core_schema.CoreSchema, handler: p.GetJsonSchemaHandler
    ) -> p.json_schema.JsonSchemaValue:
        return {"type": "string", "pattern": f"^{cls.prefix}\\{SEPARATOR}[0-9A-Za-z]{{{KEY_LENGTH}}}$"}


# fmt: off
class UserID(ShortUUIDKey, prefix="user"): ...
class AssessmentID(ShortUUIDKey, prefix="asmt"): ...
class QuestionID(ShortUUIDKey, prefix="ques"): ...
class SubmissionID(ShortUUIDKey, prefix="subm"): ...
# fmt: on
