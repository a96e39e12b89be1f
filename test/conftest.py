"""
Shared test doubles: a scripted chain gateway and image provider
"""

import asyncio
from typing import List, Optional

import pytest

from minter.chain.abis import SETUP_NEW_CONTRACT_EVENT
from minter.chain.gateway import ChainGateway
from minter.chain.payload import CreatorFactoryPayloadBuilder
from minter.chain.receipts import event_signature_hash
from minter.config import DEFAULT_CHAIN_ID, DEFAULT_CREATOR_FACTORY, DEFAULT_FIXED_PRICE_STRATEGY, Settings
from minter.errors import ImageGenerationError
from minter.orchestrator import MintOrchestrator
from minter.session import MintSession

SIGNER = "0x1111111111111111111111111111111111111111"
NEW_CONTRACT = "0x2222222222222222222222222222222222222222"
TX_HASH = "0x" + "ab" * 32


def topic_for_address(address: str) -> str:
    return "0x" + "0" * 24 + address[2:].lower()


def creation_log(address: str = NEW_CONTRACT, emitter: str = DEFAULT_CREATOR_FACTORY) -> dict:
    return {
        'address': emitter,
        'topics': [
            event_signature_hash(SETUP_NEW_CONTRACT_EVENT),
            topic_for_address(address),
            topic_for_address(SIGNER),
            topic_for_address(SIGNER),
        ],
        'data': '0x',
    }


def receipt(status: int = 1, logs: Optional[list] = None) -> dict:
    return {'status': status, 'transactionHash': TX_HASH, 'blockNumber': 123, 'logs': logs or []}


class FakeGateway(ChainGateway):
    """Scripted gateway that records every call"""

    def __init__(self, network: int = DEFAULT_CHAIN_ID, switch_ok: bool = True,
                 network_after_switch: Optional[int] = None):
        self.calls: List[str] = []
        self.network = network
        self.switch_ok = switch_ok
        self.network_after_switch = network_after_switch if network_after_switch is not None else DEFAULT_CHAIN_ID
        self.simulate_error: Optional[Exception] = None
        self.submit_error: Optional[Exception] = None
        self.receipt_error: Optional[Exception] = None
        self.receipt = receipt(logs=[creation_log()])
        self.network_error: Optional[Exception] = None
        # Set to block submit() or wait_for_receipt() until released
        self.release_submit: Optional[asyncio.Event] = None
        self.release_receipt: Optional[asyncio.Event] = None
        self.submitted_payloads = []

    async def signer_address(self) -> str:
        self.calls.append('signer_address')
        return SIGNER

    async def current_network(self) -> int:
        self.calls.append('current_network')
        if self.network_error:
            raise self.network_error
        return self.network

    async def request_network_switch(self, chain_id: int) -> bool:
        self.calls.append('request_network_switch')
        if self.switch_ok:
            self.network = self.network_after_switch
        return self.switch_ok

    async def simulate(self, payload):
        self.calls.append('simulate')
        if self.simulate_error:
            raise self.simulate_error
        return payload

    async def submit(self, payload) -> str:
        self.calls.append('submit')
        self.submitted_payloads.append(payload)
        if self.release_submit is not None:
            await self.release_submit.wait()
        if self.submit_error:
            raise self.submit_error
        return TX_HASH

    async def wait_for_receipt(self, tx_hash: str) -> dict:
        self.calls.append('wait_for_receipt')
        if self.release_receipt is not None:
            await self.release_receipt.wait()
        if self.receipt_error:
            raise self.receipt_error
        return self.receipt


class FakeImageProvider:
    def __init__(self, image_url: str = "https://x/img.png", configured: bool = True):
        self.image_url = image_url
        self.configured = configured
        self.prompts = []
        self.error: Optional[Exception] = None

    @property
    def is_configured(self) -> bool:
        return self.configured

    async def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.error:
            raise self.error
        if not self.configured:
            raise ImageGenerationError("Replicate API token not configured.")
        return self.image_url


@pytest.fixture
def settings():
    return Settings(rpc_url="http://localhost:8545")


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def builder():
    return CreatorFactoryPayloadBuilder(DEFAULT_CREATOR_FACTORY, DEFAULT_FIXED_PRICE_STRATEGY)


@pytest.fixture
def orchestrator(gateway, builder, settings):
    return MintOrchestrator(gateway, builder, settings, clock=lambda: 1_700_000_000)


@pytest.fixture
def image_provider():
    return FakeImageProvider()


@pytest.fixture
def session(image_provider, orchestrator, settings):
    return MintSession(image_provider, orchestrator, settings)
