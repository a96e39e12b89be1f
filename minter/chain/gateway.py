"""
Chain gateways: simulation, submission and receipt polling

Two signer models share one interface:
- WalletChainGateway: the user's wallet signs (JSON-RPC wallet endpoint)
- ServerKeyChainGateway: a server-held key signs locally
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import replace
from typing import Any, Dict

from eth_account import Account
from web3 import AsyncWeb3
from web3.exceptions import ContractLogicError, TimeExhausted

from minter.errors import ConfirmationError, SimulationError, SubmissionError
from minter.models import MintPayload


class ChainGateway(ABC):
    """Everything the orchestrator needs from a chain and a signer"""

    @abstractmethod
    async def signer_address(self) -> str:
        ...

    @abstractmethod
    async def current_network(self) -> int:
        ...

    @abstractmethod
    async def request_network_switch(self, chain_id: int) -> bool:
        ...

    @abstractmethod
    async def simulate(self, payload: MintPayload) -> MintPayload:
        ...

    @abstractmethod
    async def submit(self, payload: MintPayload) -> str:
        ...

    @abstractmethod
    async def wait_for_receipt(self, tx_hash: str) -> Dict[str, Any]:
        ...


class Web3ChainGateway(ChainGateway):
    """Reads, simulation and receipts over a read RPC on the target chain"""

    # Buffer on top of the node's gas estimate
    GAS_BUFFER = 1.1

    def __init__(self, rpc_url: str, receipt_timeout: float = 300, poll_interval: float = 2):
        self.rpc_url = rpc_url
        self.receipt_timeout = receipt_timeout
        self.poll_interval = poll_interval
        self.w3 = AsyncWeb3(AsyncWeb3.AsyncHTTPProvider(rpc_url))
        self.logger = logging.getLogger('coin_minter')

    async def simulate(self, payload: MintPayload) -> MintPayload:
        """eth_call + estimate_gas; a revert here means nothing gets sent"""
        sender = await self.signer_address()
        call = payload.as_call(sender)
        try:
            await self.w3.eth.call(call)
            gas_estimate = await self.w3.eth.estimate_gas(call)
        except ContractLogicError as e:
            raise SimulationError(f"Transaction would revert: {e}") from e
        except Exception as e:
            raise SimulationError(f"Simulation failed: {e}") from e

        gas_limit = int(gas_estimate * self.GAS_BUFFER)
        self.logger.info(f"Simulation successful ({payload.function_name}), gas limit {gas_limit:,}")
        return replace(payload, gas=gas_limit)

    async def wait_for_receipt(self, tx_hash: str) -> Dict[str, Any]:
        try:
            receipt = await self.w3.eth.wait_for_transaction_receipt(
                tx_hash, timeout=self.receipt_timeout, poll_latency=self.poll_interval
            )
        except TimeExhausted as e:
            raise ConfirmationError(
                f"Transaction {tx_hash} not confirmed after {self.receipt_timeout:.0f}s. "
                f"Status unknown, check the explorer.",
                tx_hash=tx_hash,
            ) from e
        except Exception as e:
            raise ConfirmationError(
                f"Lost track of transaction {tx_hash}: {e}. Status unknown, check the explorer.",
                tx_hash=tx_hash,
            ) from e
        return dict(receipt)


class ServerKeyChainGateway(Web3ChainGateway):
    """Signs with a key held by the server; the RPC decides the network"""

    def __init__(self, rpc_url: str, private_key: str, **kwargs):
        super().__init__(rpc_url, **kwargs)
        self.account = Account.from_key(private_key)
        self.nonce_lock = asyncio.Lock()

    async def signer_address(self) -> str:
        return self.account.address

    async def current_network(self) -> int:
        return await self.w3.eth.chain_id

    async def request_network_switch(self, chain_id: int) -> bool:
        self.logger.warning(f"Server signer cannot switch networks (RPC is not on chain {chain_id})")
        return False

    async def _fee_params(self) -> Dict[str, int]:
        """EIP-1559 fees: base fee with 1.2x headroom plus the node's tip"""
        latest_block = await self.w3.eth.get_block('latest')
        base_fee = latest_block['baseFeePerGas']
        max_priority_fee = await self.w3.eth.max_priority_fee
        return {
            'maxFeePerGas': int(base_fee * 1.2) + max_priority_fee,
            'maxPriorityFeePerGas': max_priority_fee,
        }

    async def submit(self, payload: MintPayload) -> str:
        try:
            chain_id = await self.w3.eth.chain_id
            fees = await self._fee_params()
            gas = payload.gas or await self.w3.eth.estimate_gas(payload.as_call(self.account.address))

            # One nonce at a time for this signer
            async with self.nonce_lock:
                nonce = await self.w3.eth.get_transaction_count(self.account.address, 'pending')
                tx = {
                    'from': self.account.address,
                    'to': payload.to,
                    'value': payload.value,
                    'data': payload.data,
                    'gas': gas,
                    'nonce': nonce,
                    'chainId': chain_id,
                    'type': 2,
                    **fees,
                }
                signed_tx = self.account.sign_transaction(tx)
                tx_hash = await self.w3.eth.send_raw_transaction(signed_tx.raw_transaction)
        except Exception as e:
            raise SubmissionError(f"Failed to submit transaction: {e}") from e

        tx_hash_hex = self.w3.to_hex(tx_hash)
        self.logger.info(f"Transaction sent: {tx_hash_hex} (nonce {nonce})")
        return tx_hash_hex


class WalletChainGateway(Web3ChainGateway):
    """The user's wallet signs; reads still go to the target-chain RPC"""

    def __init__(self, rpc_url: str, wallet_rpc_url: str, **kwargs):
        super().__init__(rpc_url, **kwargs)
        self.wallet_rpc_url = wallet_rpc_url
        self.wallet = AsyncWeb3(AsyncWeb3.AsyncHTTPProvider(wallet_rpc_url))

    async def signer_address(self) -> str:
        try:
            accounts = await self.wallet.eth.accounts
        except Exception as e:
            raise SubmissionError(f"Could not reach wallet: {e}") from e
        if not accounts:
            raise SubmissionError("No wallet account connected")
        return accounts[0]

    async def current_network(self) -> int:
        return await self.wallet.eth.chain_id

    async def request_network_switch(self, chain_id: int) -> bool:
        """wallet_switchEthereumChain; False when the user or wallet refuses"""
        try:
            response = await self.wallet.provider.make_request(
                'wallet_switchEthereumChain', [{'chainId': hex(chain_id)}]
            )
        except Exception as e:
            self.logger.warning(f"Network switch request failed: {e}")
            return False

        if response.get('error'):
            self.logger.warning(f"Network switch rejected: {response['error']}")
            return False
        return True

    async def submit(self, payload: MintPayload) -> str:
        sender = await self.signer_address()
        try:
            tx_hash = await self.wallet.eth.send_transaction(payload.as_call(sender))
        except Exception as e:
            raise SubmissionError(f"Wallet did not send the transaction: {e}") from e

        tx_hash_hex = self.wallet.to_hex(tx_hash)
        self.logger.info(f"Transaction sent from wallet {sender}: {tx_hash_hex}")
        return tx_hash_hex


def build_gateway(settings) -> ChainGateway:
    """Create the configured gateway; called once at startup"""
    kwargs = {
        'receipt_timeout': settings.receipt_timeout,
        'poll_interval': settings.receipt_poll_interval,
    }
    if settings.signer_mode == 'wallet':
        return WalletChainGateway(settings.rpc_url, settings.wallet_rpc_url, **kwargs)
    return ServerKeyChainGateway(settings.rpc_url, settings.private_key, **kwargs)
