"""
Unit tests for upload payload normalization.

Filesystem cases use pytest's tmp_path; nothing touches object storage.
"""

import base64

import pytest

from src.core.objects.errors import InvalidArgumentError
from src.core.objects.models import ContentFormat, UploadRequest
from src.core.objects.normalizer import ContentNormalizer


@pytest.fixture
def normalizer() -> ContentNormalizer:
    return ContentNormalizer()


def make_request(**overrides) -> UploadRequest:
    fields = {
        "bucket_name": "docs",
        "key": "notes/hello.txt",
        "content": "hello",
        "content_type": None,
        "content_format": None,
    }
    fields.update(overrides)
    return UploadRequest(**fields)


# ---------------------------------------------------------------------------
# Validation Order
# ---------------------------------------------------------------------------

class TestValidation:
    """Checks run in a fixed order and stop at the first failure."""

    @pytest.mark.parametrize("bucket_name", ["", "   ", None])
    def test_blank_bucket_rejected(self, normalizer, bucket_name):
        with pytest.raises(InvalidArgumentError, match="container name required"):
            normalizer.normalize(make_request(bucket_name=bucket_name))

    @pytest.mark.parametrize("key", ["", "  ", None])
    def test_blank_key_rejected(self, normalizer, key):
        with pytest.raises(InvalidArgumentError, match="key required"):
            normalizer.normalize(make_request(key=key))

    def test_missing_content_rejected(self, normalizer):
        with pytest.raises(InvalidArgumentError, match="content required"):
            normalizer.normalize(make_request(content=None))

    def test_empty_text_content_is_allowed(self, normalizer):
        payload = normalizer.normalize(make_request(content=""))
        assert payload.data == b""

    def test_unknown_encoding_rejected(self, normalizer):
        with pytest.raises(InvalidArgumentError, match="unsupported encoding"):
            normalizer.normalize(make_request(content_format="hex"))

    def test_bucket_checked_before_key_and_content(self, normalizer):
        with pytest.raises(InvalidArgumentError, match="container name required"):
            normalizer.normalize(make_request(bucket_name="", key="", content=None))

    def test_content_checked_before_encoding(self, normalizer):
        with pytest.raises(InvalidArgumentError, match="content required"):
            normalizer.normalize(make_request(content=None, content_format="hex"))


class TestContentFormatParsing:
    """Tests for ContentFormat.parse."""

    @pytest.mark.parametrize("value", [None, "", "   "])
    def test_blank_defaults_to_text(self, value):
        assert ContentFormat.parse(value) is ContentFormat.TEXT

    @pytest.mark.parametrize("value, expected", [
        ("TEXT", ContentFormat.TEXT),
        ("Base64", ContentFormat.BASE64),
        (" path ", ContentFormat.PATH),
    ])
    def test_case_insensitive(self, value, expected):
        assert ContentFormat.parse(value) is expected


# ---------------------------------------------------------------------------
# Encodings
# ---------------------------------------------------------------------------

class TestTextEncoding:
    """Text content is stored as UTF-8, untouched."""

    def test_utf8_bytes(self, normalizer):
        payload = normalizer.normalize(make_request(content="héllo 世界"))
        assert payload.data == "héllo 世界".encode("utf-8")

    def test_content_type_inferred_from_key(self, normalizer):
        payload = normalizer.normalize(make_request(key="data/config.json"))
        assert payload.content_type == "application/json"

    def test_declared_content_type_used_verbatim(self, normalizer):
        payload = normalizer.normalize(make_request(content_type="Text/X-Custom; charset=latin-1"))
        assert payload.content_type == "Text/X-Custom; charset=latin-1"

    def test_blank_declared_content_type_falls_back_to_inference(self, normalizer):
        payload = normalizer.normalize(make_request(content_type="  "))
        assert payload.content_type == "text/plain"

    def test_unknown_key_extension_gives_octet_stream(self, normalizer):
        payload = normalizer.normalize(make_request(key="LICENSE"))
        assert payload.content_type == "application/octet-stream"


class TestBase64Encoding:
    """Base64 content is decoded strictly."""

    def test_decodes_binary(self, normalizer):
        encoded = base64.b64encode(bytes([0, 1, 2, 255])).decode("ascii")
        payload = normalizer.normalize(make_request(
            key="blob.bin", content=encoded, content_format="base64",
        ))
        assert payload.data == bytes([0, 1, 2, 255])
        assert payload.content_type == "application/octet-stream"

    def test_missing_padding_accepted(self, normalizer):
        payload = normalizer.normalize(make_request(content="aGk", content_format="base64"))
        assert payload.data == b"hi"

    @pytest.mark.parametrize("content", ["not base64!!", "a", "aGk=aGk=", "aG\nk="])
    def test_malformed_rejected(self, normalizer, content):
        with pytest.raises(InvalidArgumentError, match="invalid base64 content"):
            normalizer.normalize(make_request(content=content, content_format="base64"))

    def test_content_type_inferred_from_key(self, normalizer):
        encoded = base64.b64encode(b"\x89PNG").decode("ascii")
        payload = normalizer.normalize(make_request(
            key="img/logo.png", content=encoded, content_format="BASE64",
        ))
        assert payload.content_type == "image/png"


class TestPathEncoding:
    """Path content is read from local disk."""

    def test_reads_file_bytes(self, normalizer, tmp_path):
        source = tmp_path / "data.bin"
        source.write_bytes(b"\x00\xffpayload")

        payload = normalizer.normalize(make_request(
            key="uploads/data.bin", content=str(source), content_format="path",
        ))

        assert payload.data == b"\x00\xffpayload"

    def test_content_type_inferred_from_file_name_not_key(self, normalizer, tmp_path):
        source = tmp_path / "report.pdf"
        source.write_bytes(b"%PDF-1.7")

        payload = normalizer.normalize(make_request(
            key="archive/latest.txt", content=str(source), content_format="path",
        ))

        assert payload.content_type == "application/pdf"

    def test_declared_content_type_wins(self, normalizer, tmp_path):
        source = tmp_path / "report.pdf"
        source.write_bytes(b"%PDF-1.7")

        payload = normalizer.normalize(make_request(
            content=str(source), content_type="application/x-custom", content_format="path",
        ))

        assert payload.content_type == "application/x-custom"

    def test_missing_file_rejected(self, normalizer, tmp_path):
        missing = tmp_path / "nope.txt"
        with pytest.raises(InvalidArgumentError, match="nope.txt"):
            normalizer.normalize(make_request(content=str(missing), content_format="path"))

    def test_directory_rejected(self, normalizer, tmp_path):
        with pytest.raises(InvalidArgumentError, match="not a file"):
            normalizer.normalize(make_request(content=str(tmp_path), content_format="path"))
