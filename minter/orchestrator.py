"""
Mint orchestration: validate, build metadata and payload, check the network,
submit, wait for confirmation and decode the created contract.

Every failure is terminal for the attempt and nothing is retried here;
retrying is a new attempt started by the user.
"""

import asyncio
import logging
import time
from datetime import datetime
from typing import Awaitable, Callable, List, Optional, Type

from minter.chain.gateway import ChainGateway
from minter.chain.payload import PayloadBuilder
from minter.chain.receipts import find_created_contract
from minter.errors import (
    ConfirmationError,
    MintError,
    MintCancelledError,
    MintInProgressError,
    NetworkMismatchError,
    OnChainRevertError,
    SimulationError,
    SubmissionError,
    ValidationError,
)
from minter.models import MintAttempt, MintPayload, MintRequest, MintState, SaleParameters
from minter.services.metadata import build_metadata, encode_metadata_uri, validate_request

Listener = Callable[[MintAttempt], None]

# Sale opens a minute in the past so the first mint is not early
SALE_START_LEEWAY = 60

# Error class for an unexpected failure, by the step it happened in
STEP_ERRORS = {
    MintState.VALIDATING: ValidationError,
    MintState.BUILDING_METADATA: ValidationError,
    MintState.BUILDING_PAYLOAD: SimulationError,
    MintState.AWAITING_NETWORK_CHECK: NetworkMismatchError,
    MintState.SUBMITTING: SubmissionError,
    MintState.AWAITING_CONFIRMATION: ConfirmationError,
}


class MintOrchestrator:
    """Runs one mint attempt at a time against a chain gateway"""

    def __init__(self, gateway: ChainGateway, payload_builder: PayloadBuilder, settings,
                 clock: Callable[[], float] = time.time):
        self.gateway = gateway
        self.payload_builder = payload_builder
        self.settings = settings
        self.clock = clock
        self.logger = logging.getLogger('coin_minter')

        self._attempt: Optional[MintAttempt] = None
        self._in_flight = False
        self._listeners: List[Listener] = []

    @property
    def attempt(self) -> Optional[MintAttempt]:
        return self._attempt

    @property
    def is_busy(self) -> bool:
        return self._in_flight

    def add_listener(self, listener: Listener):
        self._listeners.append(listener)

    def reset(self):
        """Drop the previous attempt and go back to idle"""
        if self._in_flight:
            raise MintInProgressError("A mint is in progress; wait for it to finish")
        self._attempt = None

    def sale_parameters(self, owner: str) -> SaleParameters:
        now = int(self.clock())
        return SaleParameters(
            sale_start=now - SALE_START_LEEWAY,
            sale_end=now + self.settings.sale_duration_days * 24 * 60 * 60,
            price_per_token=self.settings.price_per_token_wei,
            max_tokens_per_address=self.settings.max_tokens_per_address,
            initial_supply=self.settings.initial_supply,
            max_supply=self.settings.max_supply,
            funds_recipient=owner,
        )

    async def mint(self, title: str, caption: str, image_url: str) -> MintAttempt:
        """Run a full attempt and return it in a terminal state

        Raises MintInProgressError (without touching the running attempt)
        if called while another attempt is in flight.
        """
        if self._in_flight:
            raise MintInProgressError("A mint is already in progress; wait for it to finish")

        self._in_flight = True
        attempt = MintAttempt()
        self._attempt = attempt
        try:
            await self._run(attempt, title, caption, image_url)
        except MintError as e:
            self._fail(attempt, e)
        except asyncio.CancelledError:
            self._fail(attempt, self._cancellation_error(attempt))
            raise
        except Exception as e:
            self._fail(attempt, self._unexpected_error(attempt, e))
        finally:
            self._in_flight = False
        return attempt

    async def _run(self, attempt: MintAttempt, title: str, caption: str, image_url: str):
        self._transition(attempt, MintState.VALIDATING)
        request = validate_request(title, caption, image_url)
        attempt.request = request

        self._transition(attempt, MintState.BUILDING_METADATA)
        metadata = build_metadata(request, include_image=self.settings.metadata_include_image)
        attempt.metadata_uri = encode_metadata_uri(metadata)

        self._transition(attempt, MintState.BUILDING_PAYLOAD)
        payload = await self._prepare_payload(attempt.metadata_uri, request)

        await self._ensure_network(attempt)

        self._transition(attempt, MintState.SUBMITTING)
        tx_hash = await self._call(self.gateway.submit(payload), SubmissionError,
                                   "Failed to submit transaction")
        attempt.submitted_hash = tx_hash

        self._transition(attempt, MintState.AWAITING_CONFIRMATION)
        receipt = await self._call(self.gateway.wait_for_receipt(tx_hash), ConfirmationError,
                                   f"Could not confirm transaction {tx_hash}")
        attempt.receipt = receipt

        if receipt.get('status') != 1:
            raise OnChainRevertError(f"Transaction {tx_hash} reverted on-chain", tx_hash=tx_hash)

        attempt.state = MintState.CONFIRMED
        attempt.created_contract_address = find_created_contract(
            receipt, self.payload_builder.creation_event, emitter=payload.to
        )
        self._finish(attempt)

        if attempt.created_contract_address:
            self.logger.info(f"✅ Minted {request.display_title}: {attempt.created_contract_address} (tx {tx_hash})")
        else:
            self.logger.info(f"✅ Minted {request.display_title} (tx {tx_hash}); no creation log found")

    async def _prepare_payload(self, metadata_uri: str, request: MintRequest) -> MintPayload:
        owner = await self._call(self.gateway.signer_address(), SimulationError,
                                 "Could not resolve the signer address")
        sale = self.sale_parameters(owner)
        payload = self.payload_builder.build(metadata_uri, request, owner, sale)
        return await self._call(self.gateway.simulate(payload), SimulationError, "Simulation failed")

    async def _ensure_network(self, attempt: MintAttempt):
        """Signer must be on the target chain before anything is signed"""
        target = self.settings.target_chain_id
        current = await self._call(self.gateway.current_network(), SubmissionError,
                                   "Could not read the active network")
        if current == target:
            return

        self._transition(attempt, MintState.AWAITING_NETWORK_CHECK)
        self.logger.info(f"Signer on chain {current}, requesting switch to {target}")
        switched = await self._call(self.gateway.request_network_switch(target), NetworkMismatchError,
                                    "Network switch failed")
        if not switched:
            raise NetworkMismatchError(
                f"Wrong network: signer is on chain {current} but minting requires chain {target}. "
                f"Switch networks and try again."
            )

        current = await self._call(self.gateway.current_network(), SubmissionError,
                                   "Could not read the active network")
        if current != target:
            raise NetworkMismatchError(f"Still on chain {current} after switching; expected chain {target}")

    async def _call(self, awaitable: Awaitable, error_cls: Type[MintError], message: str):
        """Await a gateway call, classifying unexpected errors for this step"""
        try:
            return await awaitable
        except MintError:
            raise
        except Exception as e:
            raise error_cls(f"{message}: {e}") from e

    def _unexpected_error(self, attempt: MintAttempt, error: Exception) -> MintError:
        self.logger.exception(f"Unexpected error while {attempt.state.value}")
        error_cls = STEP_ERRORS.get(attempt.state, MintError)
        return error_cls(f"Unexpected error while {attempt.state.value}: {error}", tx_hash=attempt.submitted_hash)

    def _cancellation_error(self, attempt: MintAttempt) -> MintCancelledError:
        if attempt.submitted_hash:
            return MintCancelledError(
                f"Stopped watching transaction {attempt.submitted_hash}. "
                f"It may still be mined, check the explorer.",
                tx_hash=attempt.submitted_hash,
            )
        return MintCancelledError("Mint cancelled before anything was submitted")

    def _transition(self, attempt: MintAttempt, state: MintState):
        self.logger.debug(f"Mint attempt: {attempt.state.value} -> {state.value}")
        attempt.state = state
        attempt.history.append(state)
        self._notify(attempt)

    def _fail(self, attempt: MintAttempt, error: MintError):
        attempt.error_kind = error.kind
        attempt.error_message = error.message
        if error.tx_hash and not attempt.submitted_hash:
            attempt.submitted_hash = error.tx_hash
        attempt.state = MintState.FAILED
        self.logger.error(f"❌ Mint failed ({error.kind.value}): {error.message}")
        self._finish(attempt)

    def _finish(self, attempt: MintAttempt):
        attempt.history.append(attempt.state)
        attempt.finished_at = datetime.now()
        self._notify(attempt)

    def _notify(self, attempt: MintAttempt):
        for listener in self._listeners:
            try:
                listener(attempt)
            except Exception as e:
                self.logger.error(f"Mint listener failed: {e}")
