import datetime
import logging.config
import sys
import typing as t

TimestampProvider = t.Callable[..., datetime.datetime]

TRACE = 5


class LoggingProvider(object):
    """Applies the `logging` dictConfig once per process, adding a TRACE level below DEBUG"""

    def __init__(self, config: dict[str, t.Any], debug: bool):
        self.install_trace_level()
        logging.config.dictConfig(config)
        self.debug = debug
        if debug:
            self.capture_warnings(True)

    @staticmethod
    def install_trace_level() -> None:
        if logging.getLevelName(TRACE) == "TRACE":
            return
        logging.addLevelName(TRACE, "TRACE")

        def trace(self: logging.Logger, msg: str, *args: t.Any, **kwargs: t.Any) -> None:
            if self.isEnabledFor(TRACE):
                self._log(TRACE, msg, args, **kwargs)

        logging.Logger.trace = trace  # pyright: ignore [reportAttributeAccessIssue]

    @staticmethod
    def get_logger(name: str | None = None, depth: int = 1) -> logging.Logger:
        """Logger named for `name`, or for the calling module"""
        if name is None:
            name = sys._getframe(depth).f_globals.get("__name__", "assessor")  # pyright: ignore [reportPrivateUsage]
        return logging.getLogger(name)

    @staticmethod
    def capture_warnings(capture: bool) -> None:
        logging.captureWarnings(capture)
