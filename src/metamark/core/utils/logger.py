"""Namespaced standard-library loggers"""

import logging


def get_logger(name: str) -> logging.Logger:
    """Return a logger under the 'metamark.' namespace (e.g. 'core.parse' -> 'metamark.core.parse')."""
    if not (name == "metamark" or name.startswith("metamark.")):
        name = f"metamark.{name}"
    return logging.getLogger(name)
