"""
Chain boundary: payload builders, gateways and receipt helpers
"""

from .gateway import ChainGateway, ServerKeyChainGateway, WalletChainGateway, build_gateway
from .payload import (
    PayloadBuilder,
    CreatorFactoryPayloadBuilder,
    Erc20MinterPayloadBuilder,
    build_payload_builder,
)
from .receipts import event_signature_hash, find_created_contract

__all__ = [
    'ChainGateway',
    'ServerKeyChainGateway',
    'WalletChainGateway',
    'build_gateway',
    'PayloadBuilder',
    'CreatorFactoryPayloadBuilder',
    'Erc20MinterPayloadBuilder',
    'build_payload_builder',
    'event_signature_hash',
    'find_created_contract',
]
