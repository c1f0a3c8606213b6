import io
import threading
from datetime import datetime, timezone

import pytest
from botocore.exceptions import ClientError

from file_gateway import backend_clients, services
from file_gateway.registry import RegionConfig, RegionRegistry


class StubClient:
    """In-memory stand-in for a boto3 S3 client."""

    def __init__(self):
        self.storage = {}
        self.calls = []
        self.put_error = None
        self.get_error = None

    def list_objects_v2(self, Bucket, MaxKeys=1000, ContinuationToken=None):
        self.calls.append(("list_objects_v2", Bucket, ContinuationToken))
        keys = [key for (bucket, key) in self.storage if bucket == Bucket]
        start = int(ContinuationToken or 0)
        page = keys[start:start + MaxKeys]
        response = {
            "Contents": [
                {
                    "Key": key,
                    "Size": len(self.storage[(Bucket, key)][0]),
                    "LastModified": datetime(2024, 1, 1, tzinfo=timezone.utc),
                }
                for key in page
            ],
            "IsTruncated": start + MaxKeys < len(keys),
        }
        if response["IsTruncated"]:
            response["NextContinuationToken"] = str(start + MaxKeys)
        return response

    def put_object(self, Bucket, Key, Body, ContentLength=None, ContentType=None):
        self.calls.append(("put_object", Bucket, Key))
        if self.put_error is not None:
            raise self.put_error
        data = Body.read()
        assert ContentLength == len(data)
        self.storage[(Bucket, Key)] = (data, ContentType)

    def get_object(self, Bucket, Key):
        self.calls.append(("get_object", Bucket, Key))
        if self.get_error is not None:
            raise self.get_error
        if (Bucket, Key) not in self.storage:
            raise ClientError(
                {"Error": {"Code": "NoSuchKey", "Message": "The specified key does not exist."}},
                "GetObject",
            )
        data, content_type = self.storage[(Bucket, Key)]
        response = {"Body": io.BytesIO(data), "ContentLength": len(data)}
        if content_type:
            response["ContentType"] = content_type
        return response


def make_registry() -> RegionRegistry:
    return RegionRegistry(
        {
            "london-2": RegionConfig("https://london.example.com", "london-key", "london-secret"),
            "los-angeles": RegionConfig("https://la.example.com", "la-key", "la-secret"),
        },
        {
            "london-2": ["london-files", "london-2-image"],
            "los-angeles": ["los-angeles-files", "los-angeles-image"],
        },
    )


@pytest.fixture()
def registry():
    return make_registry()


@pytest.fixture()
def stub_backend(monkeypatch):
    """Replace client construction with a counting stub shared by all regions."""
    client = StubClient()
    built = []
    build_threads = []

    def fake_build_client(region_id, region_config):
        built.append(region_id)
        build_threads.append(threading.current_thread())
        return client

    monkeypatch.setattr(backend_clients, "build_client", fake_build_client)
    client.built = built
    client.build_threads = build_threads
    return client


@pytest.fixture()
def staging_dir(tmp_path, monkeypatch):
    path = tmp_path / "staging"
    monkeypatch.setattr(services, "UPLOAD_STAGING_DIR", path)
    return path
