import base64
import binascii

from visualgenie.exceptions import InvalidInputException


def encode_data_uri(content: bytes, media_type: str) -> str:
    """Embed binary content as a base64 data URI."""
    return f"data:{media_type};base64,{base64.b64encode(content).decode('ascii')}"


def decode_data_uri(uri: str) -> tuple[str, bytes]:
    """
    Split a base64 data URI into (media_type, content).

    Raises:
        InvalidInputException: Not a base64 data URI
    """
    if not uri.startswith("data:") or "," not in uri:
        raise InvalidInputException("imageData", "not a data URI")
    header, payload = uri[len("data:"):].split(",", 1)
    params = header.split(";")
    if "base64" not in params[1:]:
        raise InvalidInputException("imageData", "data URI is not base64 encoded")
    try:
        content = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise InvalidInputException("imageData", "invalid base64 payload") from e
    return params[0] or "application/octet-stream", content
