from __future__ import annotations

import typing as t


class Sentinel(object):
    """Falsy marker values, one instance per subclass"""

    _instances: t.ClassVar[dict[type, Sentinel]] = {}

    def __new__(cls) -> t.Self:
        if cls not in Sentinel._instances:
            Sentinel._instances[cls] = super().__new__(cls)
        return t.cast(t.Self, Sentinel._instances[cls])

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}>"


# container value that is only known once boot() has run
class NotReady(Sentinel): ...


# keyword argument left out of a partial update
class NotSet(Sentinel): ...
