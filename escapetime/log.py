"""
Logging setup for the command line application.

The library modules only create module-level loggers; configure_logging
is called once by the application entry point.
"""

import logging
import sys


LOG_FORMAT = "[%(levelname)s] %(message)s"

# Third-party loggers that are too chatty to be useful on the console
NOISY_LOGGERS = ("numba", "pygame", "PIL")


class DropThirdPartyFilter(logging.Filter):
    """Discard records coming from the NOISY_LOGGERS hierarchies."""

    def __init__(self, prefixes=NOISY_LOGGERS):
        super().__init__()
        self.prefixes = tuple(prefixes)

    def filter(self, record):
        for prefix in self.prefixes:
            if record.name == prefix or record.name.startswith(prefix + "."):
                return False
        return True


class ConsoleHandler(logging.StreamHandler):
    """Console handler installed by configure_logging."""


def configure_logging(verbose=False, stream=None):
    """
    Install a single console handler on the root logger.

    Args:
        verbose: Log at DEBUG instead of INFO
        stream: Output stream (default stderr)

    Returns:
        The installed handler
    """
    handler = ConsoleHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler.addFilter(DropThirdPartyFilter())

    root = logging.getLogger()
    for existing in list(root.handlers):
        if isinstance(existing, ConsoleHandler):
            root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(logging.DEBUG if verbose else logging.INFO)
    return handler
