"""Core models for inbound attachments and stored objects."""

from dataclasses import dataclass
from typing import BinaryIO

from pydantic import BaseModel, Field


@dataclass(frozen=True, slots=True)
class Attachment:
    """One file part of an inbound multipart body, as decoded by Robyn."""

    filename: str
    content_type: str
    size: int
    stream: BinaryIO


class StoredObject(BaseModel):
    """Object written to the store for a single attachment."""

    bucket: str
    key: str
    size: int


class UploadBatch(BaseModel):
    """Attachments of one request, grouped under a shared namespace token."""

    namespace: str
    objects: list[StoredObject] = Field(default_factory=list)

    @property
    def keys(self) -> list[str]:
        return [obj.key for obj in self.objects]
