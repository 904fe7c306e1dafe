"""Tests for signature decoding and embedding."""

import base64

import pytest

from anamnesis.documents.signature import SIGNATURE_SLOT, decode_payload, embed, extract
from anamnesis.errors import SignatureDecodeError, TemplateIntegrityError

from conftest import PNG_BASE64

PNG_BYTES = base64.b64decode(PNG_BASE64)
MARKUP = f"<html><body><div>{SIGNATURE_SLOT}</div></body></html>"


def test_decode_data_url():
    data, mime_type = decode_payload(f"data:image/png;base64,{PNG_BASE64}")
    assert data == PNG_BYTES
    assert mime_type == "image/png"


def test_decode_keeps_declared_mime_type():
    _, mime_type = decode_payload(f"data:image/jpeg;base64,{PNG_BASE64}")
    assert mime_type == "image/jpeg"


def test_decode_bare_base64():
    data, mime_type = decode_payload(PNG_BASE64)
    assert data == PNG_BYTES
    assert mime_type == "image/png"


def test_decode_tolerates_line_breaks():
    wrapped = "\n".join(PNG_BASE64[i:i + 40] for i in range(0, len(PNG_BASE64), 40))
    data, _ = decode_payload(f"data:image/png;base64,{wrapped}")
    assert data == PNG_BYTES


def test_decode_invalid_base64():
    with pytest.raises(SignatureDecodeError):
        decode_payload("data:image/png;base64,not*base64!")


def test_decode_empty_payload():
    with pytest.raises(SignatureDecodeError):
        decode_payload("data:image/png;base64,")


def test_embed_and_extract_roundtrip():
    markup = embed(MARKUP, PNG_BYTES)
    assert SIGNATURE_SLOT not in markup
    assert 'src="data:image/png;base64,' in markup
    assert extract(markup) == PNG_BYTES


def test_embed_accepts_data_url():
    markup = embed(MARKUP, f"data:image/png;base64,{PNG_BASE64}")
    assert extract(markup) == PNG_BYTES


def test_embed_uses_mime_type():
    markup = embed(MARKUP, PNG_BYTES, mime_type="image/jpeg")
    assert 'src="data:image/jpeg;base64,' in markup


def test_missing_signature_leaves_slot_empty():
    for empty in (None, b""):
        markup = embed(MARKUP, empty)
        assert markup == "<html><body><div></div></body></html>"
        assert extract(markup) is None


def test_markup_without_slot_rejected():
    with pytest.raises(TemplateIntegrityError):
        embed("<html><body></body></html>", PNG_BYTES)


def test_signature_decode_error_is_a_rendering_fault():
    from anamnesis.errors import RenderingFault

    assert issubclass(SignatureDecodeError, RenderingFault)
