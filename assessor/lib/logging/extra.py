import json
import logging
import sys
import textwrap
import typing as t

import pygments
from pygments.formatters import Terminal256Formatter
from pygments.lexers.data import JsonLexer  # pyright: ignore [reportMissingTypeStubs]
from pygments.style import Style

from .json import JSONEncoder
from .style import LogStyle

# attributes every LogRecord carries; anything else arrived through `extra=`
_STANDARD_ATTRS = frozenset(logging.LogRecord("", 0, "", 0, "", (), None).__dict__) | {
    "asctime",
    "color_message",
    "log_color",
    "message",
}


def extra_fields(record: logging.LogRecord) -> dict[str, t.Any]:
    return {k: v for k, v in record.__dict__.items() if k not in _STANDARD_ATTRS and not k.endswith("_log_color")}


class ExtraFormatter(logging.Formatter):
    """
    Wraps a base formatter (colorlog's, in the shipped config) and appends
    the record's `extra` fields as JSON, highlighted with pygments when
    stderr is a terminal.

    Continuation lines of multi-line messages are indented to line up with
    the first line of the message.
    """

    def __init__(
        self,
        base: type[logging.Formatter],
        format: str | None,
        datefmt: str | None = None,
        indent: bool | None = None,
        pyg_style: type[Style] = LogStyle,
        style: t.Literal["%", "{", "$"] = "%",
        validate: bool = True,
        **kwargs: t.Any,
    ):
        super().__init__(format, datefmt=datefmt, style=style, validate=validate)
        self.base = base(format, datefmt=datefmt, style=style, validate=validate, **kwargs)
        self.indent = 4 if indent else None
        self.pyg_style = pyg_style

    @property
    def colorize(self) -> bool:
        return not getattr(self.base, "no_color", False) and sys.stderr.isatty()

    def format(self, record: logging.LogRecord) -> str:
        # uvicorn attaches a pre-colored copy of its messages
        record.__dict__.pop("color_message", None)

        message = record.getMessage()
        if "\n" in message:
            first, rest = message.split("\n", 1)
            prefix = self.base.format(_with_message(record, first))
            width = len(prefix) - len(first)
            record.msg, record.args = first + "\n" + textwrap.indent(rest, " " * max(width, 0)), None

        formatted = self.base.format(record)
        extra = extra_fields(record)
        if not extra:
            return formatted

        payload = json.dumps(extra, sort_keys=True, indent=self.indent, cls=JSONEncoder)
        if self.colorize:
            formatter = Terminal256Formatter(style=self.pyg_style)
            payload = pygments.highlight(payload, JsonLexer(), formatter).strip()  # pyright: ignore
        return f"{formatted} {payload}"


def _with_message(record: logging.LogRecord, message: str) -> logging.LogRecord:
    clone = logging.makeLogRecord(record.__dict__)
    clone.msg, clone.args, clone.exc_info, clone.exc_text = message, None, None, None
    return clone
