"""
Signature embedding.

The renderer leaves a fixed slot element in the markup; embed() swaps it for
an inline data-URI image so the PDF converter never has to resolve a file
path. A missing signature leaves the slot empty.
"""

from __future__ import annotations

import base64
import binascii
import logging
import re

from anamnesis.errors import SignatureDecodeError, TemplateIntegrityError

logger = logging.getLogger(__name__)

SIGNATURE_SLOT = '<span class="signature-slot" data-slot="signature"></span>'
DEFAULT_MIME_TYPE = "image/png"

_DATA_URL_HEADER = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)?(;[^,]*)?$")
_INLINE_IMAGE = re.compile(
    r'<img class="signature" alt="signature" src="data:(?P<mime>[^;"]+);base64,(?P<data>[A-Za-z0-9+/=]+)"'
)


def decode_payload(payload: str) -> tuple[bytes, str]:
    """
    Decode a captured signature, e.g. ``data:image/png;base64,iVBOR...``.

    The base64 part starts after the first comma; a bare base64 string is
    accepted too. Returns (image bytes, mime type).
    """
    header, sep, encoded = payload.partition(",")
    mime_type = DEFAULT_MIME_TYPE
    if sep:
        match = _DATA_URL_HEADER.match(header.strip())
        if match and match.group("mime"):
            mime_type = match.group("mime")
    else:
        encoded = header

    try:
        data = base64.b64decode("".join(encoded.split()), validate=True)
    except (binascii.Error, ValueError) as exc:
        raise SignatureDecodeError("Signature payload is not valid base64") from exc
    if not data:
        raise SignatureDecodeError("Signature payload decodes to zero bytes")

    logger.info("Signature decoded, byte length: %d", len(data))
    return data, mime_type


def embed(markup: str, signature: bytes | str | None, mime_type: str = DEFAULT_MIME_TYPE) -> str:
    """Replace the signature slot with an inline image, or with nothing."""
    if SIGNATURE_SLOT not in markup:
        raise TemplateIntegrityError("Rendered markup has no signature slot")

    if isinstance(signature, str):
        signature, mime_type = decode_payload(signature)
    if not signature:
        return markup.replace(SIGNATURE_SLOT, "", 1)

    encoded = base64.b64encode(signature).decode("ascii")
    image = f'<img class="signature" alt="signature" src="data:{mime_type};base64,{encoded}" />'
    return markup.replace(SIGNATURE_SLOT, image, 1)


def extract(markup: str) -> bytes | None:
    """Read an embedded signature image back out of the markup."""
    match = _INLINE_IMAGE.search(markup)
    if match is None:
        return None
    return base64.b64decode(match.group("data"))
