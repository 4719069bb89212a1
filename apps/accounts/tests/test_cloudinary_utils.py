"""Tests for the Cloudinary image host (SDK calls are mocked)."""

import base64
from unittest.mock import patch

import pytest
from django.core.files.uploadedfile import SimpleUploadedFile

from apps.accounts.cloudinary_utils import (
    COVER,
    PROFILE,
    SLOT_PRESETS,
    CloudinaryImageHost,
    ImageValidationError,
    extract_public_id,
    inspect_image,
)
from apps.accounts.exceptions import UpstreamFailure

MAX_SIZE = 1024


def _host(**overrides):
    options = {
        "cloud_name": "demo",
        "api_key": "key",
        "api_secret": "secret",
        "folder": "user-uploads",
        "max_size": MAX_SIZE,
    }
    options.update(overrides)
    return CloudinaryImageHost(**options)


def _data_uri(payload=b"\x89PNG....", mime="image/png"):
    return f"data:{mime};base64,{base64.b64encode(payload).decode()}"


class TestValidation:

    def test_uploaded_file_accepted(self):
        img = SimpleUploadedFile("face.jpg", b"\xff\xd8\xff", content_type="image/jpeg")
        _host().validate(img)

    def test_data_uri_inspected(self):
        assert inspect_image(_data_uri(b"abc")) == ("image/png", 3)

    def test_unsupported_type(self):
        f = SimpleUploadedFile("notes.txt", b"hello", content_type="text/plain")
        with pytest.raises(ImageValidationError):
            _host().validate(f)

    @pytest.mark.parametrize("name", ["face.gif", "face.png.exe", "face"])
    def test_extension_checked_as_well_as_type(self, name):
        f = SimpleUploadedFile(name, b"\x89PNG", content_type="image/png")
        with pytest.raises(ImageValidationError, match="extension"):
            _host().validate(f)

    def test_extension_case_insensitive(self):
        img = SimpleUploadedFile("FACE.JPEG", b"\xff\xd8\xff", content_type="image/jpeg")
        _host().validate(img)

    def test_gif_not_allowed(self):
        with pytest.raises(ImageValidationError):
            _host().validate(_data_uri(mime="image/gif"))

    def test_oversized_file(self):
        big = SimpleUploadedFile("big.png", b"\x00" * (MAX_SIZE + 1), content_type="image/png")
        with pytest.raises(ImageValidationError, match="exceeds"):
            _host().validate(big)

    def test_oversized_data_uri(self):
        with pytest.raises(ImageValidationError):
            _host().validate(_data_uri(b"\x00" * (MAX_SIZE + 1)))

    def test_bad_base64(self):
        with pytest.raises(ImageValidationError):
            _host().validate("data:image/png;base64,@@@not-base64@@@")

    def test_plain_string_rejected(self):
        with pytest.raises(ImageValidationError):
            _host().validate("https://example.com/me.png")


class TestExtractPublicId:

    def test_versioned_url(self):
        url = "https://res.cloudinary.com/demo/image/upload/v1712/user-uploads/profiles/123-abc.webp"
        assert extract_public_id(url) == "user-uploads/profiles/123-abc"

    def test_unversioned_url(self):
        url = "https://res.cloudinary.com/demo/image/upload/user-uploads/covers/x.jpg"
        assert extract_public_id(url) == "user-uploads/covers/x"

    def test_not_cloudinary(self):
        assert extract_public_id("https://example.com/avatar.png") is None

    def test_blank(self):
        assert extract_public_id("") is None


class TestUpload:

    @patch("cloudinary.uploader.upload")
    def test_profile_upload(self, mock_upload):
        mock_upload.return_value = {"secure_url": "https://cdn.example.com/p.webp"}
        url = _host().upload(_data_uri(), PROFILE)

        assert url == "https://cdn.example.com/p.webp"
        kwargs = mock_upload.call_args.kwargs
        assert kwargs["transformation"] == SLOT_PRESETS[PROFILE][1]
        assert kwargs["transformation"][0]["gravity"] == "face"
        assert kwargs["public_id"].startswith("user-uploads/profiles/")

    @patch("cloudinary.uploader.upload")
    def test_cover_preset(self, mock_upload):
        mock_upload.return_value = {"secure_url": "https://cdn.example.com/c.webp"}
        _host().upload(_data_uri(), COVER)
        first_step = mock_upload.call_args.kwargs["transformation"][0]
        assert (first_step["width"], first_step["height"]) == (1200, 400)

    def test_public_ids_unique(self):
        host = _host()
        ids = {host.generate_public_id(PROFILE) for _ in range(50)}
        assert len(ids) == 50

    def test_public_id_without_folder(self):
        public_id = _host(folder="").generate_public_id(COVER)
        assert public_id.startswith("covers/")

    @patch("cloudinary.uploader.upload", side_effect=Exception("boom"))
    def test_sdk_failure_is_upstream_failure(self, mock_upload):
        with pytest.raises(UpstreamFailure):
            _host().upload(_data_uri(), PROFILE)

    @patch("cloudinary.uploader.upload", return_value={})
    def test_missing_url_is_upstream_failure(self, mock_upload):
        with pytest.raises(UpstreamFailure):
            _host().upload(_data_uri(), PROFILE)

    @patch("cloudinary.uploader.upload")
    def test_unconfigured(self, mock_upload):
        with pytest.raises(UpstreamFailure):
            _host(api_secret="").upload(_data_uri(), PROFILE)
        mock_upload.assert_not_called()

    @patch("cloudinary.uploader.upload")
    def test_invalid_payload_never_uploaded(self, mock_upload):
        with pytest.raises(ImageValidationError):
            _host().upload(_data_uri(mime="text/plain"), PROFILE)
        mock_upload.assert_not_called()

    def test_from_settings(self, settings):
        settings.CLOUDINARY_FOLDER = "/tribe/"
        settings.MAX_UPLOAD_SIZE = 42
        host = CloudinaryImageHost.from_settings()
        assert host.folder == "tribe"
        assert host.max_size == 42


class TestDelete:

    URL = "https://res.cloudinary.com/demo/image/upload/v1/user-uploads/profiles/old.webp"

    @patch("cloudinary.uploader.destroy")
    def test_delete(self, mock_destroy):
        assert _host().delete(self.URL) is True
        mock_destroy.assert_called_once_with("user-uploads/profiles/old", invalidate=True)

    @patch("cloudinary.uploader.destroy", side_effect=Exception("network down"))
    def test_failure_is_swallowed(self, mock_destroy):
        assert _host().delete(self.URL) is False

    @patch("cloudinary.uploader.destroy")
    def test_non_cloudinary_url_skipped(self, mock_destroy):
        assert _host().delete("https://example.com/a.png") is False
        mock_destroy.assert_not_called()
