"""Object store lifespan event."""

import boto3

from maildrop.core.exceptions import ConfigurationError
from maildrop.core.lifespan import BaseEvent
from maildrop.core.logger import LogIcon, logger
from maildrop.core.settings import Settings, settings
from maildrop.services.store import AttachmentStore


def create_store(config: Settings) -> AttachmentStore:
    """Build the attachment store from settings. Fails fast without a bucket."""
    if not config.BUCKET:
        raise ConfigurationError("BUCKET must be set to store attachments")
    client = boto3.client("s3", **config.s3_config)
    return AttachmentStore(client=client, bucket=config.BUCKET)


class StorageEvent(BaseEvent[AttachmentStore]):
    """Creates the S3 client and destination bucket reference once per process."""

    name = "storage"

    async def startup(self) -> AttachmentStore:
        store = create_store(settings)
        if not settings.API_KEY.get_secret_value():
            logger.warning("API_KEY is not set, every inbound request will be rejected", icon=LogIcon.AUTH)
        logger.info("Attachment store ready", icon=LogIcon.STORAGE, bucket=store.bucket)
        return store

    async def shutdown(self, instance: AttachmentStore) -> None:
        instance.client.close()
