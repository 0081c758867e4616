from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.engine import Dialect
from sqlalchemy.sql.type_api import TypeDecorator
from sqlalchemy.types import JSON, String

from assessor.model.id import ShortUUIDKey

# JSONB on PostgreSQL, plain JSON elsewhere
JSONDocument = JSON().with_variant(JSONB(), "postgresql")


class ShortUUIDKeyType(TypeDecorator[ShortUUIDKey]):
    """Stores only the shortuuid part of a prefixed key"""

    impl = String
    cache_ok = True

    def __init__(self, key_type: type[ShortUUIDKey]):
        self.key_type = key_type
        super().__init__(22)  # length of shortuuid

    def process_bind_param(self, value: ShortUUIDKey | str | None, dialect: Dialect) -> str | None:
        if value is None:
            return value
        if not isinstance(value, self.key_type):
            value = self.key_type(value)
        return value.key

    def process_result_value(self, value: str | None, dialect: Dialect) -> ShortUUIDKey | None:
        if value is not None:
            return self.key_type.from_key(value)
        return value
