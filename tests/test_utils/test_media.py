"""Data URL helper tests"""

import pytest

from studioflow.core.utils.media import file_to_data_url, parse_data_url, to_data_url


def test_parse_data_url():
    image = parse_data_url("data:image/jpeg;base64,QUJD")
    assert image.mime_type == "image/jpeg"
    assert image.data == "QUJD"
    assert image.to_bytes() == b"ABC"


@pytest.mark.parametrize(
    "value",
    [None, "", "https://example.com/a.png", "data:text/plain;base64,QUJD", "data:image/png", 42],
)
def test_non_image_values(value):
    assert parse_data_url(value) is None


def test_file_to_data_url(tmp_path):
    path = tmp_path / "photo.jpg"
    path.write_bytes(b"ABC")
    assert file_to_data_url(path) == to_data_url("QUJD", "image/jpeg")
