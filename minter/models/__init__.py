"""
Data models for mint requests and attempts
"""

from .mint import (
    MintRequest,
    CoinMetadata,
    SaleParameters,
    MintPayload,
    MintAttempt,
    MintState,
    ErrorKind,
)

__all__ = [
    'MintRequest',
    'CoinMetadata',
    'SaleParameters',
    'MintPayload',
    'MintAttempt',
    'MintState',
    'ErrorKind',
]
