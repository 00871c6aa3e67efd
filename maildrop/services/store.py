"""
Attachment Store

Streams attachment bytes into S3 objects. The boto3 client is blocking, so
each write runs on a worker thread and many writes can be in flight at once
from a single event loop.
"""

import asyncio
import io
from typing import BinaryIO

from boto3.exceptions import Boto3Error
from botocore.exceptions import BotoCoreError, ClientError

from maildrop.core.exceptions import StoreWriteError
from maildrop.core.logger import LogIcon, logger
from maildrop.models.core import StoredObject


class AttachmentStore:
    """Destination bucket plus the S3 client used to write into it."""

    def __init__(self, client, bucket: str) -> None:
        self.client = client
        self.bucket = bucket

    def __repr__(self) -> str:
        return f"AttachmentStore(bucket={self.bucket!r})"

    def _upload(self, key: str, stream: BinaryIO) -> int:
        """Blocking upload; returns the number of bytes sent."""
        start = stream.tell()
        size = stream.seek(0, io.SEEK_END) - start
        stream.seek(start)
        self.client.upload_fileobj(stream, self.bucket, key)
        return size

    async def write(self, key: str, stream: BinaryIO) -> StoredObject:
        """
        Pipe a byte stream into ``<bucket>/<key>``.

        Returns once S3 has acknowledged the object. Store failures are raised
        as StoreWriteError; a failed multipart upload may leave nothing or a
        partial object behind, no cleanup is attempted.
        """
        try:
            size = await asyncio.to_thread(self._upload, key, stream)
        except (Boto3Error, BotoCoreError, ClientError) as ex:
            raise StoreWriteError(key=key, bucket=self.bucket, reason=str(ex)) from ex

        logger.info("Attachment stored", icon=LogIcon.UPLOAD, bucket=self.bucket, key=key, size=size)
        return StoredObject(bucket=self.bucket, key=key, size=size)
