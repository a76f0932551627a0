"""Unit tests for cloudinify/delivery.py (path parsing and resize rewriting)."""

from __future__ import annotations

import httpx
import pytest

from cloudinify.delivery import (
    RESIZE_FORMAT_MESSAGE,
    get_resized_image_url,
    parse_delivery_path,
    resize_transformation,
)
from cloudinify.errors import CloudinifyValidationError
from cloudinify.models import DeliveryPath

GOLDEN = "https://res.cloudinary.com/yourcloudname/image/upload/v1579703365/q8zrn0wevsuj30albned.png"


# ---------------------------------------------------------------------------
# parse_delivery_path
# ---------------------------------------------------------------------------

class TestParseDeliveryPath:
    def test_versioned(self):
        parsed = parse_delivery_path("/cloud/image/upload/v123/abc.png")
        assert parsed == DeliveryPath(
            cloud_name="cloud",
            resource_type="image",
            delivery_type="upload",
            public_id="abc.png",
            version="v123",
        )

    def test_unversioned(self):
        parsed = parse_delivery_path("/cloud/image/upload/img.jpg")
        assert parsed.version is None
        assert parsed.public_id == "img.jpg"
        assert parsed.transformations == ()

    def test_existing_transformations(self):
        parsed = parse_delivery_path("/cloud/image/upload/c_crop,g_face/e_sepia/v9/a.png")
        assert parsed.transformations == ("c_crop,g_face", "e_sepia")
        assert parsed.version == "v9"
        assert parsed.public_id == "a.png"

    def test_folders_kept_in_public_id(self):
        parsed = parse_delivery_path("/cloud/image/upload/v1/folder/sub/a.png")
        assert parsed.public_id == "folder/sub/a.png"

    def test_folder_without_version(self):
        parsed = parse_delivery_path("/cloud/image/upload/folder/a.png")
        assert parsed.public_id == "folder/a.png"
        assert parsed.transformations == ()

    def test_last_segment_always_public_id(self):
        parsed = parse_delivery_path("/cloud/image/upload/v123")
        assert parsed.version is None
        assert parsed.public_id == "v123"

    def test_other_resource_types_parse(self):
        parsed = parse_delivery_path("/cloud/video/private/v1/clip.mp4")
        assert parsed.resource_type == "video"
        assert parsed.delivery_type == "private"

    def test_round_trip(self):
        path = "/cloud/image/upload/w_10/v1/f/a.png"
        assert parse_delivery_path(path).to_path() == path

    @pytest.mark.parametrize(
        "path, reason",
        [
            ("cloud/image/upload/a.png", "relative_path"),
            ("/cloud/blah/laaa.png", "too_short"),
            ("/cloud/image/upload", "too_short"),
            ("/cloud", "too_short"),
            ("/", "empty_segment"),
            ("", "relative_path"),
            ("/cloud/image/upload/", "empty_segment"),
            ("/cloud//upload/a.png", "empty_segment"),
        ],
    )
    def test_malformed_paths_rejected(self, path, reason):
        with pytest.raises(CloudinifyValidationError) as exc_info:
            parse_delivery_path(path)
        assert exc_info.value.context["reason"] == reason


# ---------------------------------------------------------------------------
# get_resized_image_url
# ---------------------------------------------------------------------------

class TestGetResizedImageUrl:
    def test_versioned_path(self):
        resized = get_resized_image_url("https://res.cloudinary.com/cloud/image/upload/v123/abc.png", 100, 200)
        assert resized.path == "/cloud/image/upload/w_100,h_200,c_fit/v123/abc.png"

    def test_golden_url(self):
        resized = get_resized_image_url(httpx.URL(GOLDEN), 100, 200)
        assert str(resized) == (
            "https://res.cloudinary.com/yourcloudname/image/upload/"
            "w_100,h_200,c_fit/v1579703365/q8zrn0wevsuj30albned.png"
        )

    def test_unversioned_path(self):
        resized = get_resized_image_url("https://res.cloudinary.com/yourcloudname/image/upload/img.jpg", 100, 200)
        assert str(resized) == "https://res.cloudinary.com/yourcloudname/image/upload/w_100,h_200,c_fit/img.jpg"

    def test_inserted_before_existing_transformations(self):
        resized = get_resized_image_url("https://res.cloudinary.com/c/image/upload/e_sepia/v1/a.png", 5, 6)
        assert resized.path == "/c/image/upload/w_5,h_6,c_fit/e_sepia/v1/a.png"

    def test_query_and_fragment_kept(self):
        resized = get_resized_image_url("https://res.cloudinary.com/c/image/upload/a.png?x=1#top", 1, 2)
        assert resized.query == b"x=1"
        assert resized.fragment == "top"

    def test_input_not_mutated(self):
        original = httpx.URL(GOLDEN)
        get_resized_image_url(original, 100, 200)
        assert str(original) == GOLDEN

    def test_bad_path(self):
        with pytest.raises(CloudinifyValidationError) as exc_info:
            get_resized_image_url("https://res.cloudinary.com/cloud/blah/laaa.png", 100, 200)
        assert str(exc_info.value) == RESIZE_FORMAT_MESSAGE

    def test_relative_bad_path(self):
        with pytest.raises(CloudinifyValidationError):
            get_resized_image_url("yourcloudname/blah/laaa.png", 100, 200)

    def test_not_image_resource(self):
        with pytest.raises(CloudinifyValidationError) as exc_info:
            get_resized_image_url("https://res.cloudinary.com/c/raw/upload/a.txt", 1, 1)
        assert exc_info.value.context["reason"] == "not_image_upload"

    def test_not_upload_delivery(self):
        with pytest.raises(CloudinifyValidationError):
            get_resized_image_url("https://res.cloudinary.com/c/image/fetch/a.png", 1, 1)

    def test_short_path_does_not_crash(self):
        with pytest.raises(CloudinifyValidationError):
            get_resized_image_url("https://res.cloudinary.com/", 1, 1)

    def test_unparseable_url(self):
        with pytest.raises(CloudinifyValidationError) as exc_info:
            get_resized_image_url("https://res.cloudinary.com:abc/c/image/upload/a.png", 1, 1)
        assert exc_info.value.context["reason"] == "invalid_url"

    @pytest.mark.parametrize("public_id", ["a%2Fb.png", "a%3Fb.png", "my%20photo.png", "caf%C3%A9.png"])
    def test_encoded_public_id_kept_verbatim(self, public_id):
        resized = get_resized_image_url(f"https://res.cloudinary.com/c/image/upload/v1/{public_id}", 1, 2)
        assert resized.raw_path == f"/c/image/upload/w_1,h_2,c_fit/v1/{public_id}".encode()

    def test_encoded_slash_not_split_into_folder(self):
        resized = get_resized_image_url("https://res.cloudinary.com/c/image/upload/v1/a%2Fb.png", 1, 2)
        assert parse_delivery_path(resized.raw_path.decode()).public_id == "a%2Fb.png"

    def test_encoded_question_mark_with_real_query(self):
        resized = get_resized_image_url("https://res.cloudinary.com/c/image/upload/a%3Fb.png?x=1", 1, 2)
        assert resized.raw_path == b"/c/image/upload/w_1,h_2,c_fit/a%3Fb.png?x=1"
        assert resized.params["x"] == "1"


class TestResizeTransformation:
    def test_format(self):
        assert resize_transformation(100, 200) == "w_100,h_200,c_fit"
