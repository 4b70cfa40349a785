"""Signature payload validation"""

import base64

import pytest

from propodesk.domain.signatures import (
    MAX_SIGNATURE_BYTES,
    SignatureError,
    normalize_signature,
    signature_from_upload,
)

from .conftest import PNG_SIGNATURE


class TestNormalizeSignature:
    def test_png_data_url_round_trips(self):
        assert normalize_signature(PNG_SIGNATURE) == PNG_SIGNATURE

    def test_jpg_alias_is_canonicalised(self):
        payload = "data:image/JPG;base64," + base64.b64encode(b"jpeg-bytes").decode()
        assert normalize_signature(payload).startswith("data:image/jpeg;base64,")

    def test_whitespace_in_base64_is_removed(self):
        encoded = base64.b64encode(b"signature").decode()
        payload = f"data:image/png;base64,{encoded[:4]}\n{encoded[4:]}"
        assert normalize_signature(payload) == f"data:image/png;base64,{encoded}"

    @pytest.mark.parametrize(
        "payload",
        [
            "not a data url",
            "data:text/html;base64,PGgxPg==",
            "data:image/gif;base64,R0lGODlh",
            "data:image/png;base64,",
            "data:image/png;base64,@@@@",
        ],
    )
    def test_rejects_bad_payloads(self, payload):
        with pytest.raises(SignatureError):
            normalize_signature(payload)

    def test_rejects_oversized_image(self):
        payload = "data:image/png;base64," + base64.b64encode(b"0" * (MAX_SIGNATURE_BYTES + 1)).decode()
        with pytest.raises(SignatureError):
            normalize_signature(payload)


class TestSignatureFromUpload:
    def test_svg_upload(self):
        svg = b"<svg xmlns='http://www.w3.org/2000/svg'></svg>"
        data_url = signature_from_upload(svg, "image/svg+xml")
        assert data_url == "data:image/svg+xml;base64," + base64.b64encode(svg).decode()

    def test_rejects_pdf(self):
        with pytest.raises(SignatureError):
            signature_from_upload(b"%PDF-1.4", "application/pdf")

    def test_rejects_empty_upload(self):
        with pytest.raises(SignatureError):
            signature_from_upload(b"", "image/png")
