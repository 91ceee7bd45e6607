"""
Logging configuration for Deckflow.

Routes through Logfire when LOGFIRE_TOKEN is configured, otherwise falls back
to the standard library logger with a compact console format.
"""
import io
import logging
import os
import sys
from typing import Optional

import logfire

from config.settings import get_settings

LOGFIRE_CONFIGURED = False


def configure_logfire(force: bool = False) -> bool:
    """
    Configure Logfire once per process.

    Args:
        force: Reconfigure even if already configured

    Returns:
        True if Logfire is active
    """
    global LOGFIRE_CONFIGURED

    if LOGFIRE_CONFIGURED and not force:
        return True

    token = get_settings().LOGFIRE_TOKEN
    if not token:
        return False

    # Logfire prints the project URL on configure; keep the console clean
    old_stdout, old_stderr = sys.stdout, sys.stderr
    sys.stdout, sys.stderr = io.StringIO(), io.StringIO()
    os.environ['LOGFIRE_CONSOLE_NO_SHOW'] = '1'
    try:
        logfire.configure(
            token=token,
            service_name="deckflow",
            service_version=os.getenv("APP_VERSION", "dev"),
            console=False
        )
        LOGFIRE_CONFIGURED = True
    except Exception as e:
        sys.stdout, sys.stderr = old_stdout, old_stderr
        print(f"ERROR: Logfire configuration failed: {e}")
        LOGFIRE_CONFIGURED = False
    finally:
        sys.stdout, sys.stderr = old_stdout, old_stderr

    return LOGFIRE_CONFIGURED


class LogfireLogger:
    """Wrapper to make Logfire work like standard Python logging."""

    def __init__(self, name: str):
        self.name = name

    def _format(self, message, args) -> str:
        if args:
            message = message % args
        return f"[{self.name}] {message}"

    def info(self, message, *args, **kwargs):
        logfire.info(self._format(message, args), **kwargs)

    def warning(self, message, *args, **kwargs):
        logfire.warn(self._format(message, args), **kwargs)

    warn = warning

    def error(self, message, *args, **kwargs):
        kwargs.pop('exc_info', None)
        logfire.error(self._format(message, args), **kwargs)

    def debug(self, message, *args, **kwargs):
        logfire.debug(self._format(message, args), **kwargs)

    def exception(self, message, *args, **kwargs):
        kwargs.pop('exc_info', None)
        logfire.exception(self._format(message, args), **kwargs)

    def setLevel(self, level):
        # Logfire filters on the server side
        pass


class StandardLogger:
    """Standard Python logger when Logfire is not configured."""

    def __init__(self, name: str, level: Optional[str] = None):
        self.logger = logging.getLogger(name)

        level_name = (level or get_settings().LOG_LEVEL or 'INFO').upper()
        log_level = getattr(logging, level_name, logging.INFO)
        self.logger.setLevel(log_level)

        if not self.logger.handlers:
            handler = logging.StreamHandler()
            handler.setLevel(log_level)
            handler.setFormatter(logging.Formatter('[%(levelname)s %(name)s] %(message)s'))
            self.logger.addHandler(handler)

    def info(self, message, *args, **kwargs):
        self.logger.info(message, *args, **kwargs)

    def warning(self, message, *args, **kwargs):
        self.logger.warning(message, *args, **kwargs)

    warn = warning

    def error(self, message, *args, **kwargs):
        self.logger.error(message, *args, **kwargs)

    def debug(self, message, *args, **kwargs):
        self.logger.debug(message, *args, **kwargs)

    def exception(self, message, *args, **kwargs):
        self.logger.exception(message, *args, **kwargs)

    def setLevel(self, level):
        self.logger.setLevel(level)


def setup_logger(name: str, level: Optional[str] = None):
    """
    Set up a logger using Logfire or standard Python logging if not configured.

    Args:
        name: Logger name (usually __name__)
        level: Logging level override (standard logger only)

    Returns:
        LogfireLogger or StandardLogger instance
    """
    if configure_logfire():
        return LogfireLogger(name)
    return StandardLogger(name, level)
