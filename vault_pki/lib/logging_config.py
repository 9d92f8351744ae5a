"""JSON logging configuration for vault_pki."""

import logging
import os
import re

from pythonjsonlogger import jsonlogger

LOG_LEVEL_ENV = "VAULT_PKI_LOG_LEVEL"

_PRIVATE_KEY_PATTERN = re.compile(
    r"-----BEGIN ([A-Z ]*)PRIVATE KEY-----.*?-----END \1PRIVATE KEY-----",
    re.DOTALL,
)


class PrivateKeyRedactingFilter(logging.Filter):
    """Replace any PEM private key block in a record's message."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        if "PRIVATE KEY-----" in message:
            record.msg = _PRIVATE_KEY_PATTERN.sub("[REDACTED PRIVATE KEY]", message)
            record.args = None
        return True


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """JSON formatter with a fixed field set.

    Keeps timestamp, level, logger, message, exc_info, funcName and lineno.
    """

    allowed_fields = frozenset(
        {"timestamp", "level", "logger", "message", "exc_info", "funcName", "lineno"}
    )

    def add_fields(self, log_record, record, message_dict):
        super().add_fields(log_record, record, message_dict)

        if "levelname" in log_record:
            log_record["level"] = log_record.pop("levelname")
        # Child loggers (vault_pki.lib.*) share one handler
        log_record["logger"] = record.name

        for key in [key for key in log_record if key not in self.allowed_fields]:
            log_record.pop(key)


def _setup_logger() -> logging.Logger:
    """Initialize and configure singleton logger.

    Level comes from VAULT_PKI_LOG_LEVEL (default INFO).
    """
    logger = logging.getLogger("vault_pki")

    # Prevent duplicate handlers if module reloaded
    if logger.handlers:
        return logger

    handler = logging.StreamHandler()
    handler.setFormatter(
        CustomJsonFormatter(
            fmt="%(timestamp)s %(levelname)s %(funcName)s %(lineno)d %(message)s",
            timestamp=True,
        )
    )
    handler.addFilter(PrivateKeyRedactingFilter())

    level_name = os.environ.get(LOG_LEVEL_ENV, "INFO").upper()
    logger.setLevel(logging.getLevelNamesMapping().get(level_name, logging.INFO))
    logger.addHandler(handler)
    logger.propagate = False

    return logger


# Singleton logger instance - import this in scripts
LOGGER = _setup_logger()
