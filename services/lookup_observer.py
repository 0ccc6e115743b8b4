"""
Structured event sink for the lookup pipeline.

Pipeline components report what they are doing through an injected
observer instead of writing to a global logger directly. The default
LoggingObserver forwards each event to stdlib logging with its fields
serialized as a JSON context suffix:

    identity.resolved | Context: {"email": "john.doe@example.com", "count": 2}
"""
import json
import logging
from typing import Any, Optional


class LookupObserver:
    """Receives leveled pipeline events. The base implementation drops them."""

    def event(self, level: int, name: str, **fields: Any) -> None:
        pass

    def debug(self, name: str, **fields: Any) -> None:
        self.event(logging.DEBUG, name, **fields)

    def info(self, name: str, **fields: Any) -> None:
        self.event(logging.INFO, name, **fields)

    def warning(self, name: str, **fields: Any) -> None:
        self.event(logging.WARNING, name, **fields)

    def error(self, name: str, **fields: Any) -> None:
        self.event(logging.ERROR, name, **fields)


class LoggingObserver(LookupObserver):
    """Observer that writes events to a stdlib logger."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger("lookup")

    def event(self, level: int, name: str, **fields: Any) -> None:
        if not self.logger.isEnabledFor(level):
            return
        message = name
        if fields:
            message = f"{name} | Context: {json.dumps(fields, default=str)}"
        self.logger.log(level, message)


def default_observer(logger: logging.Logger, observer: Optional[LookupObserver] = None) -> LookupObserver:
    """Return ``observer`` or a LoggingObserver bound to ``logger``."""
    return observer if observer is not None else LoggingObserver(logger)
