"""Tests for the contents API base64 codec."""

import pytest

from ghlink.error_handling import GitHubAPIError
from ghlink.github import decode_content, encode_content

from conftest import wrap_base64


class TestContentCodec:
    """Uploaded bytes must come back unchanged."""

    @pytest.mark.parametrize("data", [
        b"",
        bytes(range(256)),
        "日本語のテキスト 🔗".encode("utf-8"),
        b"%PDF-1.7\n" + bytes(range(256)) * 40,
    ])
    def test_round_trip_is_lossless(self, data: bytes) -> None:
        assert decode_content(encode_content(data)) == data

    def test_decodes_line_wrapped_content(self) -> None:
        """GitHub wraps base64 bodies at 60 columns."""
        data = bytes(range(256)) * 3
        wrapped = wrap_base64(data)

        assert "\n" in wrapped
        assert decode_content(wrapped) == data

    def test_encoded_content_is_ascii_without_newlines(self) -> None:
        encoded = encode_content(b"x" * 500)

        assert "\n" not in encoded
        assert encoded.isascii()

    def test_rejects_malformed_content(self) -> None:
        with pytest.raises(GitHubAPIError):
            decode_content("not*base64")
