"""Turn the files Robyn decodes from a multipart body into attachments."""

import io
import mimetypes
import re
from collections.abc import Iterator, Mapping

from maildrop.core.exceptions import MultipartParseError
from maildrop.core.logger import LogIcon, logger
from maildrop.models.core import Attachment

DEFAULT_CONTENT_TYPE = "application/octet-stream"

_PATH_SEPARATORS = re.compile(r"[\\/]")


def attachment_filename(raw_name: str) -> str:
    """Last path component of a client-supplied filename, for either separator."""
    return _PATH_SEPARATORS.split(raw_name)[-1]


def _as_bytes(name: str, content) -> bytes:
    match content:
        case bytes():
            return content
        case bytearray() | memoryview():
            return bytes(content)
        case str():
            return content.encode("utf-8")
        case _:
            raise MultipartParseError("Unsupported file content", filename=name, type=type(content).__name__)


def iter_request_files(files: Mapping[str, bytes] | None) -> Iterator[Attachment]:
    """
    Yield one attachment per uploaded file.

    Robyn keys ``request.files`` by the client's filename. The name is reduced
    to its last path component so it cannot add folders to the object key;
    files whose name has nothing left after that are skipped.

    Raises:
        MultipartParseError: If a file's content is not bytes-like.
    """
    for raw_name, content in (files or {}).items():
        filename = attachment_filename(raw_name)
        if not filename:
            logger.warning("Skipping attachment without filename", icon=LogIcon.WARNING, raw_name=raw_name)
            continue

        data = _as_bytes(raw_name, content)
        content_type, _ = mimetypes.guess_type(filename)
        yield Attachment(
            filename=filename,
            content_type=content_type or DEFAULT_CONTENT_TYPE,
            size=len(data),
            stream=io.BytesIO(data),
        )
