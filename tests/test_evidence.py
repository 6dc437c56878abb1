"""Tests for evidence image decoding and fitting."""
import base64

import pytest

from conftest import make_data_url, make_image_bytes, strip_jpeg_app0
from web.exceptions import GENERATION_ERROR_PREFIX, DecodeError
from web.services.evidence import (
    DecodedImage,
    decode_data_url,
    fit_dimensions,
    fit_image,
    round_half_up,
)

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"


class TestDecodeDataUrl:
    """Tests for decode_data_url()."""

    @pytest.mark.parametrize("payload", [None, ""])
    def test_no_image(self, payload):
        assert decode_data_url(payload) is None

    def test_png_data_url(self):
        data = make_image_bytes(4, 4)
        decoded = decode_data_url(make_data_url(data))

        assert decoded.data == data
        assert decoded.subtype == "png"
        assert decoded.image_type == "png"

    @pytest.mark.parametrize("subtype", ["jpeg", "webp"])
    def test_jpeg_and_webp_tagged_as_png(self, subtype):
        decoded = decode_data_url(make_data_url(b"abc", subtype))
        assert decoded.subtype == subtype
        assert decoded.image_type == "png"

    def test_other_subtype_passes_through(self):
        assert decode_data_url(make_data_url(b"abc", "gif")).image_type == "gif"

    def test_bare_base64(self):
        decoded = decode_data_url(base64.b64encode(b"raw bytes").decode("ascii"))
        assert decoded.data == b"raw bytes"
        assert decoded.subtype is None

    def test_line_wrapped_payload(self):
        encoded = base64.b64encode(b"0123456789" * 10).decode("ascii")
        wrapped = "\n".join(encoded[i:i + 20] for i in range(0, len(encoded), 20))
        assert decode_data_url(f"data:image/png;base64,{wrapped}").data == b"0123456789" * 10

    def test_invalid_base64(self):
        with pytest.raises(DecodeError) as exc_info:
            decode_data_url("data:image/png;base64,@@not-base64@@")
        assert str(exc_info.value).startswith(GENERATION_ERROR_PREFIX)

    def test_missing_base64_marker(self):
        with pytest.raises(DecodeError):
            decode_data_url("data:image/png,abcd")

    def test_empty_body(self):
        with pytest.raises(DecodeError):
            decode_data_url("data:image/png;base64,")


class TestFitDimensions:
    """The two-pass fit caps width first, then height."""

    def test_wide_image(self):
        assert fit_dimensions(1200, 300, 600, 450) == (600, 150)

    def test_tall_image(self):
        assert fit_dimensions(100, 900, 600, 450) == (50, 450)

    def test_both_passes(self):
        width, height = fit_dimensions(1200, 1200, 600, 450)
        assert (width, height) == (450, 450)

    def test_image_inside_box_unchanged(self):
        assert fit_dimensions(320, 240, 600, 450) == (320, 240)

    @pytest.mark.parametrize("size", [(601, 449), (5000, 4000), (1, 10000), (10000, 1)])
    def test_never_exceeds_box(self, size):
        width, height = fit_dimensions(*size, 600, 450)
        assert width <= 600
        assert height <= 450

    @pytest.mark.parametrize("size", [(0, 10), (10, 0), (-5, 10)])
    def test_non_positive_dimensions(self, size):
        with pytest.raises(ValueError):
            fit_dimensions(*size)

    def test_round_half_up(self):
        assert round_half_up(2.5) == 3
        assert round_half_up(199.8) == 200
        assert round_half_up(149.49) == 149


class TestFitImage:

    def test_fits_png(self):
        fitted = fit_image(DecodedImage(make_image_bytes(1200, 300), "png"))

        assert (fitted.width, fitted.height) == (600, 150)
        assert (fitted.original_width, fitted.original_height) == (1200, 300)
        assert fitted.caption == "Imagen de evidencia (600x150px)"
        assert fitted.data.startswith(PNG_SIGNATURE)

    def test_jpeg_kept_as_is(self):
        data = make_image_bytes(40, 30, "JPEG")
        fitted = fit_image(DecodedImage(data, "jpeg"))
        assert fitted.data == data
        assert fitted.image_type == "png"

    def test_declared_type_carried_through(self):
        fitted = fit_image(DecodedImage(make_image_bytes(40, 30, "GIF"), "gif"))
        assert fitted.image_type == "gif"

    def test_jpeg_without_jfif_marker_converted_to_png(self):
        """Pillow reads a JPEG lacking its APP0 segment but Word embedding needs the marker."""
        data = strip_jpeg_app0(make_image_bytes(40, 30, "JPEG"))
        fitted = fit_image(DecodedImage(data, "jpeg"))

        assert fitted.data.startswith(PNG_SIGNATURE)
        assert (fitted.width, fitted.height) == (40, 30)
        assert fitted.image_type == "png"

    def test_unembeddable_format_converted_to_png(self):
        fitted = fit_image(DecodedImage(make_image_bytes(40, 30, "PPM"), None))
        assert fitted.data.startswith(PNG_SIGNATURE)
        assert fitted.image_type == "png"
        assert (fitted.width, fitted.height) == (40, 30)

    def test_custom_box(self):
        fitted = fit_image(DecodedImage(make_image_bytes(1000, 333), "png"), 600, 450)
        assert (fitted.width, fitted.height) == (600, 200)

    def test_unreadable_bytes(self):
        with pytest.raises(OSError):
            fit_image(DecodedImage(b"definitely not an image", "png"))
