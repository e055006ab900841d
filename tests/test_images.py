"""Tests for image data URLs."""

from pathlib import Path

import pytest

from birthdaybook.errors import ValidationError
from birthdaybook.images import from_data_url, to_data_url

PNG_BYTES = b"\x89PNG\r\n\x1a\nfake"


class TestDataUrl:
    def test_encode_decode(self, tmp_path: Path):
        path = tmp_path / "face.png"
        path.write_bytes(PNG_BYTES)
        url = to_data_url(path)
        assert url.startswith("data:image/png;base64,")
        assert from_data_url(url) == ("image/png", PNG_BYTES)

    def test_not_an_image(self, tmp_path: Path):
        path = tmp_path / "notes.txt"
        path.write_text("hello")
        with pytest.raises(ValidationError):
            to_data_url(path)

    def test_bad_data_url(self):
        with pytest.raises(ValidationError):
            from_data_url("https://example.com/x.png")

    def test_none_data_url(self):
        with pytest.raises(ValidationError):
            from_data_url(None)
