import base64
import binascii
import re
from typing import Tuple

_DATA_URL_RE = re.compile(r"^data:([A-Za-z0-9.+/-]+);base64,(.+)$", re.DOTALL)


def is_data_url(url: str) -> bool:
    return url.startswith("data:")


def decode_data_url(url: str) -> Tuple[str, bytes]:
    """data:<mime>;base64,<payload> → (mime, bytes). ValueError, если формат неверный"""
    match = _DATA_URL_RE.match(url)
    if not match:
        raise ValueError("Некорректный data URL дизайна")
    mime_type, payload = match.groups()
    try:
        return mime_type, base64.b64decode(payload, validate=True)
    except binascii.Error as e:
        raise ValueError(f"Некорректный base64 в data URL: {str(e)}") from e
