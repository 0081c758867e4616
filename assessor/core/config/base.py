import typing as t

from pydantic_settings import BaseSettings as PydanticBaseSettings

from assessor.model import BaseModel


# NOTE: BaseModel comes second so that its by_alias=True model_dump wins
class BaseSettings(PydanticBaseSettings, BaseModel):  # pyright: ignore [reportIncompatibleVariableOverride]
    """Settings which may also be built from a plain mapping, `Settings(cf)`"""

    def __init__(self, cf: t.Mapping[str, t.Any] | None = None, /, **kwargs: t.Any):
        super().__init__(**{**(cf or {}), **kwargs})


class BaseSecrets(BaseModel):
    """A group of secret values; only the top-level `Secrets` reads the environment"""

    def __init__(self, cf: t.Mapping[str, t.Any] | None = None, /, **kwargs: t.Any):
        super().__init__(**{**(cf or {}), **kwargs})
