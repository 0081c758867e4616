import typing as t

from assessor.lib.json import encode
from assessor.lib.json import JSONEncoder as BaseJSONEncoder
from assessor.lib.json import JSONValue


def encode_bytes(obj: bytes) -> str:
    """Short hex preview: length, then at most the first 16 bytes"""
    preview = " ".join(f"{b:02X}" for b in obj[:16])
    if len(obj) > 16:
        preview += " ..."
    return f"[{len(obj):5}] {preview}"


class JSONEncoder(BaseJSONEncoder):
    """Encoder for log `extra` payloads: never fails, falls back to repr()"""

    def default(self, o: t.Any) -> JSONValue:
        if isinstance(o, (bytes, bytearray)):
            return encode_bytes(bytes(o))
        try:
            return encode(o)
        except TypeError:
            return repr(o)
