import json
import logging
from logging.config import dictConfig

# Loggers of the backend SDKs; their debug output includes request signing.
SDK_LOGGERS = ("boto3", "botocore", "s3transfer", "urllib3", "google")


def setup_logging(level: str = "INFO", *, sdk_level: str = "WARNING") -> None:
    """Send ``storage`` records to stderr as JSON lines.

    SDK loggers get a plain one-line format at ``sdk_level`` so that their
    output never mixes with the structured operation log.
    """
    level = level.upper()
    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "json": {"()": JsonFormatter},
                "sdk": {"format": "%(levelname)s %(name)s: %(message)s"},
            },
            "handlers": {
                "json_stderr": {
                    "class": "logging.StreamHandler",
                    "formatter": "json",
                },
                "sdk_stderr": {
                    "class": "logging.StreamHandler",
                    "formatter": "sdk",
                },
            },
            "root": {"level": level, "handlers": ["json_stderr"]},
            "loggers": {
                "storage": {"level": level, "propagate": True},
                **{
                    name: {
                        "handlers": ["sdk_stderr"],
                        "level": sdk_level.upper(),
                        "propagate": False,
                    }
                    for name in SDK_LOGGERS
                },
            },
        }
    )


class JsonFormatter(logging.Formatter):
    """One JSON object per record; ``extra={"extra": {...}}`` fields are merged in."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        fields = getattr(record, "extra", None)
        if isinstance(fields, dict):
            payload.update(fields)
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)
