"""
Payload builders: turn metadata and sale terms into an unsigned contract call
"""

import logging
from abc import ABC, abstractmethod
from typing import List, Optional

from eth_utils import to_checksum_address
from web3 import Web3
from web3.exceptions import Web3Exception

from minter.chain.abis import (
    CREATOR_FACTORY_ABI,
    CREATOR_CONTRACT_ABI,
    FIXED_PRICE_STRATEGY_ABI,
    ERC20_MINTER_ABI,
    SETUP_NEW_CONTRACT_EVENT,
    FIRST_TOKEN_ID,
    PERMISSION_BIT_MINTER,
)
from minter.errors import SimulationError
from minter.models import MintPayload, MintRequest, SaleParameters

# Encoding only, never connects
_encoder = Web3()


class PayloadBuilder(ABC):
    """Builds the contract call that creates a coin"""

    # Canonical signature of the event announcing the new contract, if any
    creation_event: Optional[str] = None

    def __init__(self, target: str):
        self.target = to_checksum_address(target)
        self.logger = logging.getLogger('coin_minter')

    def build(self, metadata_uri: str, request: MintRequest, owner: str,
              sale: SaleParameters) -> MintPayload:
        """Encode the call; any encoding problem is a SimulationError"""
        try:
            return self._build(metadata_uri, request, to_checksum_address(owner), sale)
        except SimulationError:
            raise
        except (ValueError, TypeError, OverflowError, Web3Exception) as e:
            raise SimulationError(f"Failed to build mint transaction: {e}") from e

    @abstractmethod
    def _build(self, metadata_uri: str, request: MintRequest, owner: str,
               sale: SaleParameters) -> MintPayload:
        ...


class CreatorFactoryPayloadBuilder(PayloadBuilder):
    """Creates a new 1155 creator contract with one token and an open fixed-price sale"""

    creation_event = SETUP_NEW_CONTRACT_EVENT

    def __init__(self, factory_address: str, sale_strategy_address: str, royalty_bps: int = 0):
        super().__init__(factory_address)
        self.sale_strategy = to_checksum_address(sale_strategy_address)
        self.royalty_bps = royalty_bps
        self.factory = _encoder.eth.contract(address=self.target, abi=CREATOR_FACTORY_ABI)
        self.creator_contract = _encoder.eth.contract(abi=CREATOR_CONTRACT_ABI)
        self.strategy = _encoder.eth.contract(address=self.sale_strategy, abi=FIXED_PRICE_STRATEGY_ABI)

    def setup_actions(self, metadata_uri: str, owner: str, sale: SaleParameters) -> List[bytes]:
        """Calls the factory replays on the new contract right after creation"""
        token_id = FIRST_TOKEN_ID
        sale_data = self.strategy.encode_abi('setSale', args=[
            token_id,
            (sale.sale_start, sale.sale_end, sale.max_tokens_per_address,
             sale.price_per_token, to_checksum_address(sale.funds_recipient)),
        ])

        calls = [
            ('setupNewToken', [metadata_uri, sale.max_supply]),
            ('addPermission', [token_id, self.sale_strategy, PERMISSION_BIT_MINTER]),
            ('callSale', [token_id, self.sale_strategy, Web3.to_bytes(hexstr=sale_data)]),
        ]
        if sale.initial_supply > 0:
            calls.append(('adminMint', [owner, token_id, sale.initial_supply, b""]))
        return [Web3.to_bytes(hexstr=self.creator_contract.encode_abi(name, args=args)) for name, args in calls]

    def _build(self, metadata_uri, request, owner, sale):
        actions = self.setup_actions(metadata_uri, owner, sale)
        royalty = (0, self.royalty_bps, owner)
        args = (metadata_uri, request.display_title, royalty, owner, actions)
        data = self.factory.encode_abi('createContractDeterministic', args=list(args))

        self.logger.debug(
            f"Built createContractDeterministic for {request.display_title} "
            f"({len(actions)} setup actions, factory {self.target})"
        )
        return MintPayload(
            to=self.target,
            data=data,
            value=0,
            function_name='createContractDeterministic',
            args=args,
        )


class Erc20MinterPayloadBuilder(PayloadBuilder):
    """Fixed ERC-20 sale through a minter contract's createCoin"""

    def __init__(self, minter_address: str):
        super().__init__(minter_address)
        self.minter = _encoder.eth.contract(address=self.target, abi=ERC20_MINTER_ABI)

    def _build(self, metadata_uri, request, owner, sale):
        args = (
            request.display_title,
            request.symbol,
            owner,
            sale.initial_supply,
            sale.max_supply,
            sale.sale_start,
            sale.sale_end,
            sale.max_tokens_per_address,
            sale.price_per_token,
            to_checksum_address(sale.funds_recipient),
            metadata_uri,
        )
        data = self.minter.encode_abi('createCoin', args=list(args))
        return MintPayload(
            to=self.target,
            data=data,
            value=0,
            function_name='createCoin',
            args=args,
        )


def build_payload_builder(settings) -> PayloadBuilder:
    """Pick the transaction strategy from configuration"""
    if settings.mint_strategy == 'erc20':
        return Erc20MinterPayloadBuilder(settings.erc20_minter_address)
    return CreatorFactoryPayloadBuilder(
        settings.creator_factory_address,
        settings.fixed_price_strategy_address,
    )
