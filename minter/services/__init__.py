"""
Services for metadata encoding and image generation
"""

from .metadata import validate_request, build_metadata, encode_metadata_uri, decode_metadata_uri
from .image_provider import ReplicateImageProvider, classify_output, to_image_url

__all__ = [
    'validate_request',
    'build_metadata',
    'encode_metadata_uri',
    'decode_metadata_uri',
    'ReplicateImageProvider',
    'classify_output',
    'to_image_url',
]
