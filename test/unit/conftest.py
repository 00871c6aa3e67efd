"""Test fixtures for maildrop unit tests."""

import uuid
from dataclasses import dataclass, field

import boto3
import pytest
from moto import mock_aws

from maildrop.core.lifespan import State
from maildrop.models.core import Attachment
from maildrop.services.attachments import iter_request_files
from maildrop.services.store import AttachmentStore

TEST_BUCKET = "test-inbound-attachments"
TEST_API_KEY = "s3cr3t-relay-key"


# -----------------------------------------------------------------------------
# Mock classes for Robyn Request
# -----------------------------------------------------------------------------


@dataclass
class MockHeaders:
    """Mock Headers object for Robyn Request."""

    _data: dict = field(default_factory=dict)

    def get(self, key: str, default: str | None = None) -> str | None:
        return self._data.get(key.lower(), default)

    def set(self, key: str, value: str) -> None:
        self._data[key.lower()] = value

    def __getitem__(self, key: str) -> str:
        return self._data[key.lower()]


@dataclass
class MockQueryParams:
    """Mock QueryParams object for Robyn Request."""

    _data: dict = field(default_factory=dict)

    def get(self, key: str, default: str | None = None) -> str | None:
        return self._data.get(key, default)


@dataclass
class MockRequest:
    """
    Mock Request object for Robyn.

    Mirrors what Robyn hands a handler for a multipart POST: the decoded files
    keyed by filename in ``files``, text fields in ``form_data`` and, in
    ``body``, only the content of one part rather than the raw multipart body.
    """

    body: str = ""
    files: dict = field(default_factory=dict)
    form_data: dict = field(default_factory=dict)
    headers: MockHeaders = field(default_factory=MockHeaders)
    query_params: MockQueryParams = field(default_factory=MockQueryParams)
    method: str = "POST"
    path: str = "/inbound"


def make_attachments(files: dict[str, bytes]) -> list[Attachment]:
    """Attachments as produced from a decoded ``request.files`` mapping."""
    return list(iter_request_files(files))


@pytest.fixture
def make_request():
    """Factory fixture to create inbound email requests as Robyn delivers them."""

    def _make(
        files: dict[str, bytes] | None = None,
        *,
        method: str = "POST",
        key: str | None = TEST_API_KEY,
        fields: dict[str, str] | None = None,
    ) -> MockRequest:
        files = files or {}
        first_part = next(iter(files.values()), b"")
        query = {"key": key} if key is not None else {}
        return MockRequest(
            body=first_part.decode("utf-8", errors="replace"),
            files=dict(files),
            form_data=dict(fields or {}),
            headers=MockHeaders({"content-type": f"multipart/form-data; boundary={uuid.uuid4().hex}"}),
            query_params=MockQueryParams(query),
            method=method,
        )

    return _make


# -----------------------------------------------------------------------------
# AWS fixtures
# -----------------------------------------------------------------------------


@pytest.fixture
def aws_credentials() -> dict:
    """Mock AWS credentials for moto."""
    return {
        "aws_access_key_id": "testing",
        "aws_secret_access_key": "testing",
        "region_name": "us-east-1",
    }


@pytest.fixture
def s3_client(aws_credentials):
    """Mocked S3 client with the attachment bucket created."""
    with mock_aws():
        client = boto3.client("s3", **aws_credentials)
        client.create_bucket(Bucket=TEST_BUCKET)
        yield client


@pytest.fixture
def store(s3_client) -> AttachmentStore:
    return AttachmentStore(client=s3_client, bucket=TEST_BUCKET)


def list_keys(client, bucket: str = TEST_BUCKET) -> list[str]:
    response = client.list_objects_v2(Bucket=bucket)
    return sorted(obj["Key"] for obj in response.get("Contents", []))


# -----------------------------------------------------------------------------
# State fixture
# -----------------------------------------------------------------------------


@pytest.fixture
def global_dependencies(store: AttachmentStore) -> dict:
    """Global dependencies as injected by the lifespan."""
    state = State()
    state.storage = store
    yield {"state": state}
    state.clear()
