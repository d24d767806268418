"""
Unit tests for the tool-facing gateway operations.

Runs against the in-memory storage client, so every round trip exercises
the normalizer, the selector and the store together.
"""

import base64
import os

import pytest

from src.core.objects.errors import InvalidArgumentError, ObjectNotFoundError
from src.core.objects.gateway import ObjectGateway
from src.core.objects.selector import ResponseSelector
from src.infrastructure.storage.client import MockStorageClient

BUCKET = "test-bucket"


@pytest.fixture
def store() -> MockStorageClient:
    store = MockStorageClient()
    store.create_bucket(BUCKET)
    return store


@pytest.fixture
def gateway(store, tmp_path) -> ObjectGateway:
    selector = ResponseSelector(temp_dir=str(tmp_path), temp_prefix="r2download_")
    return ObjectGateway(store=store, selector=selector)


# ---------------------------------------------------------------------------
# Uploads
# ---------------------------------------------------------------------------

class TestUploadObject:
    """Tests for upload_object."""

    def test_returns_success_message(self, gateway):
        message = gateway.upload_object(BUCKET, "hello.txt", "hello")
        assert message == f"Object uploaded successfully to bucket: '{BUCKET}' with key: 'hello.txt'."

    def test_stores_inferred_content_type(self, gateway, store):
        gateway.upload_object(BUCKET, "data/config.json", '{"a": 1}')
        assert store.head_object(BUCKET, "data/config.json").content_type == "application/json"

    def test_path_upload_infers_type_from_file_name(self, gateway, store, tmp_path):
        source = tmp_path / "report.pdf"
        source.write_bytes(b"%PDF-1.7 fake")

        gateway.upload_object(BUCKET, "reports/latest", str(source), content_format="path")

        metadata = store.head_object(BUCKET, "reports/latest")
        assert metadata.content_type == "application/pdf"
        assert store.get_object(BUCKET, "reports/latest") == b"%PDF-1.7 fake"

    def test_malformed_base64_creates_no_object(self, gateway, store):
        with pytest.raises(InvalidArgumentError):
            gateway.upload_object(BUCKET, "blob.bin", "@@not-base64@@", content_format="base64")

        assert store.list_objects(BUCKET) == []

    def test_upload_overwrites_existing_key(self, gateway, store):
        gateway.upload_object(BUCKET, "a.txt", "first")
        gateway.upload_object(BUCKET, "a.txt", "second")
        assert store.get_object(BUCKET, "a.txt") == b"second"

    def test_missing_bucket_surfaces_storage_error(self, gateway):
        with pytest.raises(ObjectNotFoundError):
            gateway.upload_object("no-such-bucket", "a.txt", "x")


class TestUploadWritesOnce:
    """Exactly one put per successful upload, none on invalid input."""

    class RecordingStore(MockStorageClient):
        def __init__(self):
            super().__init__()
            self.puts = []

        def put_object(self, bucket_name, key, data, content_type):
            self.puts.append((bucket_name, key, data, content_type))
            return super().put_object(bucket_name, key, data, content_type)

    def test_single_put(self):
        store = self.RecordingStore()
        store.create_bucket(BUCKET)

        ObjectGateway(store).upload_object(BUCKET, "x.md", "# hi")

        assert store.puts == [(BUCKET, "x.md", b"# hi", "text/markdown")]

    @pytest.mark.parametrize("kwargs", [
        {"bucket_name": "", "key": "k", "content": "c"},
        {"bucket_name": BUCKET, "key": " ", "content": "c"},
        {"bucket_name": BUCKET, "key": "k", "content": None},
        {"bucket_name": BUCKET, "key": "k", "content": "c", "content_format": "yaml"},
        {"bucket_name": BUCKET, "key": "k", "content": "/no/such/file", "content_format": "path"},
    ])
    def test_no_put_on_invalid_input(self, kwargs):
        store = self.RecordingStore()
        store.create_bucket(BUCKET)

        with pytest.raises(InvalidArgumentError):
            ObjectGateway(store).upload_object(**kwargs)

        assert store.puts == []


# ---------------------------------------------------------------------------
# Downloads
# ---------------------------------------------------------------------------

class TestDownloadObject:
    """Tests for download_object round trips."""

    def test_text_round_trip(self, gateway):
        gateway.upload_object(BUCKET, "greeting.txt", "hello", content_format="text")

        result = gateway.download_object(BUCKET, "greeting.txt", response_type="text")

        assert result == "hello"

    def test_base64_round_trip_through_file_mode(self, gateway):
        encoded = base64.b64encode(bytes([0, 1, 2, 255])).decode("ascii")
        gateway.upload_object(BUCKET, "blob.bin", encoded, content_format="base64")

        path = gateway.download_object(BUCKET, "blob.bin", response_type="file")

        with open(path, "rb") as f:
            assert f.read() == bytes([0, 1, 2, 255])

    def test_text_object_auto_detected_inline(self, gateway):
        gateway.upload_object(BUCKET, "plain.txt", "inline me", content_type="text/plain")

        assert gateway.download_object(BUCKET, "plain.txt") == "inline me"

    def test_text_object_with_destination_returns_path(self, gateway, tmp_path):
        gateway.upload_object(BUCKET, "plain.txt", "save me", content_type="text/plain")
        destination = tmp_path / "exports" / "plain.txt"

        result = gateway.download_object(BUCKET, "plain.txt", destination_path=str(destination))

        assert result == str(destination)
        assert destination.read_text() == "save me"

    def test_binary_object_auto_detected_to_temp_file(self, gateway, tmp_path):
        gateway.upload_object(BUCKET, "pic.png", base64.b64encode(b"\x89PNG").decode(), content_format="base64")

        result = gateway.download_object(BUCKET, "pic.png")

        assert os.path.dirname(result) == str(tmp_path)
        assert result.endswith(".png")

    def test_missing_key_fails_before_any_file_is_created(self, gateway, tmp_path):
        destination = tmp_path / "out" / "missing.bin"

        with pytest.raises(ObjectNotFoundError):
            gateway.download_object(BUCKET, "missing.bin", destination_path=str(destination))
        with pytest.raises(ObjectNotFoundError):
            gateway.download_object(BUCKET, "missing.bin")

        assert list(tmp_path.iterdir()) == []

    def test_blank_key_rejected(self, gateway):
        with pytest.raises(InvalidArgumentError, match="key required"):
            gateway.download_object(BUCKET, "")


# ---------------------------------------------------------------------------
# Pass-through Operations
# ---------------------------------------------------------------------------

class TestPassThroughOperations:
    """Bucket lifecycle, listing, metadata and deletion."""

    def test_bucket_lifecycle(self, gateway):
        assert gateway.create_bucket("fresh") == "Bucket 'fresh' created successfully."
        assert "fresh" in gateway.list_buckets()

        assert gateway.delete_bucket("fresh") == "Bucket 'fresh' deleted successfully."
        assert "fresh" not in gateway.list_buckets()

    def test_list_objects_with_prefix(self, gateway):
        gateway.upload_object(BUCKET, "logs/a.txt", "aa")
        gateway.upload_object(BUCKET, "logs/b.txt", "bbb")
        gateway.upload_object(BUCKET, "other/c.txt", "c")

        objects = gateway.list_objects(BUCKET, "logs/")

        assert [o["key"] for o in objects] == ["logs/a.txt", "logs/b.txt"]
        assert objects[1]["size"] == "3"
        assert objects[0]["lastModified"]

    def test_list_objects_without_prefix(self, gateway):
        gateway.upload_object(BUCKET, "one.txt", "1")
        assert len(gateway.list_objects(BUCKET)) == 1

    def test_get_object_metadata(self, gateway):
        gateway.upload_object(BUCKET, "doc.json", '{"k": "v"}')

        metadata = gateway.get_object_metadata(BUCKET, "doc.json")

        assert metadata["contentType"] == "application/json"
        assert metadata["contentLength"] == "10"
        assert metadata["lastModified"]

    def test_get_metadata_missing_object(self, gateway):
        with pytest.raises(ObjectNotFoundError):
            gateway.get_object_metadata(BUCKET, "ghost.txt")

    def test_delete_object(self, gateway):
        gateway.upload_object(BUCKET, "temp.txt", "x")

        message = gateway.delete_object(BUCKET, "temp.txt")

        assert message == f"Object deleted successfully from bucket: '{BUCKET}' with key: 'temp.txt'."
        assert gateway.list_objects(BUCKET) == []

    def test_delete_is_safe_to_repeat(self, gateway):
        gateway.delete_object(BUCKET, "never-existed.txt")
        gateway.delete_object(BUCKET, "never-existed.txt")

    def test_blank_bucket_rejected(self, gateway):
        with pytest.raises(InvalidArgumentError):
            gateway.create_bucket("  ")

    @pytest.mark.parametrize("call", [
        lambda g: g.create_bucket("  "),
        lambda g: g.delete_bucket(""),
        lambda g: g.list_objects(" "),
        lambda g: g.get_object_metadata("", "a.txt"),
        lambda g: g.delete_object("", "a.txt"),
        lambda g: g.download_object("", "a.txt"),
        lambda g: g.upload_object("", "a.txt", "x"),
    ])
    def test_blank_bucket_message_is_uniform(self, gateway, call):
        with pytest.raises(InvalidArgumentError, match="container name required"):
            call(gateway)
