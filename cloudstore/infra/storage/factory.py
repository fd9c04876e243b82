from __future__ import annotations

import logging

from cloudstore.common.config import Settings, get_settings
from cloudstore.common.logging import setup_logging
from cloudstore.infra.observability.metrics import set_metrics_enabled
from cloudstore.infra.storage.client import Service
from cloudstore.infra.storage.gcs_client import GCSStorageClient
from cloudstore.infra.storage.s3_client import S3StorageClient

logger = logging.getLogger("storage")


def build_service(settings: Settings | None = None) -> Service:
    """Construct the adapter selected by ``STORAGE_BACKEND``.

    Leaves logging configuration to the host application; use
    ``create_service`` when this package owns process startup.
    """
    settings = settings or get_settings()
    set_metrics_enabled(settings.ENABLE_METRICS)

    service: Service
    if settings.STORAGE_BACKEND == "gcs":
        service = GCSStorageClient.from_settings(settings)
    else:
        service = S3StorageClient.from_settings(settings)

    logger.info(
        "storage_backend_ready backend=%s",
        service.backend,
        extra={"extra": {"backend": service.backend}},
    )
    return service


def create_service(settings: Settings | None = None) -> Service:
    """Startup entry point: configure logging from ``LOG_LEVEL``, then build.

    Call once at startup and inject the result wherever storage is needed.
    """
    settings = settings or get_settings()
    setup_logging(settings.LOG_LEVEL)
    return build_service(settings)
