"""
Coin metadata: input validation and data URI encoding
"""

import base64
import json
from typing import Dict

from minter.errors import ValidationError
from minter.models import MintRequest, CoinMetadata

TICKER_MARKER = "$"
METADATA_URI_PREFIX = "data:application/json;base64,"


def validate_request(title: str, caption: str, image_url: str) -> MintRequest:
    """Build a MintRequest, rejecting anything that cannot be minted

    The title doubles as the ticker and must carry the marker:
    "$ART" is accepted, "ART" and a bare "$" are not.
    """
    fields = (('imageUrl', image_url), ('title', title), ('caption', caption))
    wrong_type = [name for name, value in fields if value is not None and not isinstance(value, str)]
    if wrong_type:
        raise ValidationError(f"Fields must be text: {', '.join(wrong_type)}")

    title = (title or "").strip()
    caption = (caption or "").strip()
    image_url = (image_url or "").strip()

    missing = [name for name, value in (('imageUrl', image_url), ('title', title), ('caption', caption)) if not value]
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    if not title.startswith(TICKER_MARKER):
        raise ValidationError(f"Title must start with '{TICKER_MARKER}' (e.g. {TICKER_MARKER}{title.upper()})")

    if len(title) == len(TICKER_MARKER):
        raise ValidationError(f"Title needs a ticker after '{TICKER_MARKER}'")

    return MintRequest(display_title=title, caption=caption, image_url=image_url)


def build_metadata(request: MintRequest, include_image: bool = False) -> CoinMetadata:
    """Derive coin metadata from a validated request"""
    return CoinMetadata(
        name=request.display_title,
        description=request.caption,
        image=request.image_url if include_image else None,
    )


def encode_metadata_uri(metadata: CoinMetadata) -> str:
    """Encode metadata as a base64 JSON data URI

    Same metadata always gives the same bytes, so a rebuilt payload
    simulates identically.
    """
    if not metadata.name or not metadata.description:
        raise ValidationError("Metadata needs both a name and a description")
    payload = json.dumps(metadata.to_dict(), separators=(',', ':'), ensure_ascii=False)
    encoded = base64.b64encode(payload.encode('utf-8')).decode('ascii')
    return f"{METADATA_URI_PREFIX}{encoded}"


def decode_metadata_uri(uri: str) -> Dict[str, str]:
    """Inverse of encode_metadata_uri"""
    if not uri.startswith(METADATA_URI_PREFIX):
        raise ValueError("Not a base64 JSON data URI")
    raw = base64.b64decode(uri[len(METADATA_URI_PREFIX):])
    return json.loads(raw.decode('utf-8'))
