"""Fan attachments of one inbound email out to the store and join on the batch."""

import asyncio
import uuid
from collections.abc import Iterable

from asgi_correlation_id import correlation_id

from maildrop.core.logger import LogIcon, logger
from maildrop.models.core import Attachment, StoredObject, UploadBatch
from maildrop.services.store import AttachmentStore


def new_namespace() -> str:
    """Random per-request folder name."""
    return uuid.uuid4().hex


def object_key(namespace: str, filename: str, prefix: str = "") -> str:
    return f"{prefix}{namespace}/{filename}"


async def _store_attachment(store: AttachmentStore, key: str, attachment: Attachment) -> StoredObject:
    try:
        return await store.write(key, attachment.stream)
    finally:
        attachment.stream.close()


def _log_write_failure(task: asyncio.Task) -> None:
    """Retrieve a finished write's exception so none goes unobserved."""
    if task.cancelled():
        return
    if ex := task.exception():
        logger.warning("Attachment write failed", icon=LogIcon.ERROR, task=task.get_name(), error=str(ex))


async def upload_attachments(
    attachments: Iterable[Attachment],
    store: AttachmentStore,
    *,
    prefix: str = "",
) -> UploadBatch:
    """
    Store every attachment of one email under a fresh namespace.

    A write starts as soon as its attachment is produced; writes run
    concurrently and are joined once the source is exhausted. The first
    failing write is raised, the remaining writes keep running and their
    failures are only logged.

    Raises:
        MultipartParseError: If the attachments cannot be decoded.
        StoreWriteError: If any attachment write fails.
    """
    namespace = new_namespace()
    token = correlation_id.set(namespace)
    try:
        writes: list[asyncio.Task[StoredObject]] = []
        for attachment in attachments:
            logger.info(
                "Attachment received",
                icon=LogIcon.FILE,
                attachment=attachment.filename,
                content_type=attachment.content_type,
                size=attachment.size,
            )
            key = object_key(namespace, attachment.filename, prefix)
            task = asyncio.create_task(_store_attachment(store, key, attachment), name=key)
            task.add_done_callback(_log_write_failure)
            writes.append(task)
            # Let the write start before the next attachment is decoded
            await asyncio.sleep(0)

        logger.info("Form parsed", icon=LogIcon.PROCESSING, namespace=namespace, attachments=len(writes))
        objects = await asyncio.gather(*writes)
        return UploadBatch(namespace=namespace, objects=list(objects))
    finally:
        correlation_id.reset(token)
