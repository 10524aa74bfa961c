"""Structured logging helpers.

``get_logger(__name__, component="session")`` returns an adapter that tags
every record with its component; ``configure_logging`` in ``config`` installs
the JSON or key-value handler on the root logger.
"""

import logging
from typing import Optional, Union


class ComponentLoggerAdapter(logging.LoggerAdapter):
    """LoggerAdapter that merges its component with per-call extra fields."""

    def process(self, msg, kwargs):
        # Call-site extra takes precedence over the adapter's component
        kwargs["extra"] = {**self.extra, **kwargs.get("extra", {})}
        return msg, kwargs


def get_logger(name: str, component: Optional[str] = None) -> Union[logging.Logger, ComponentLoggerAdapter]:
    """Get a logger with an optional default component field.

    Args:
        name: Logger name (typically __name__)
        component: Optional component identifier to inject into all logs

    Returns:
        Logger or ComponentLoggerAdapter instance

    Example:
        >>> logger = get_logger(__name__, component="matching")
        >>> logger.debug("Query tokenized", extra={"event": "matching.query.tokenized"})
    """
    logger = logging.getLogger(name)

    if component:
        return ComponentLoggerAdapter(logger, {"component": component})

    return logger
