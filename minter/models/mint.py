"""
Mint request, metadata and attempt models
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional


class MintState(str, Enum):
    """Lifecycle of a single mint attempt"""
    IDLE = "idle"
    VALIDATING = "validating"
    BUILDING_METADATA = "building_metadata"
    BUILDING_PAYLOAD = "building_payload"
    AWAITING_NETWORK_CHECK = "awaiting_network_check"
    SUBMITTING = "submitting"
    AWAITING_CONFIRMATION = "awaiting_confirmation"
    CONFIRMED = "confirmed"
    FAILED = "failed"


class ErrorKind(str, Enum):
    """Classification attached to every failed attempt"""
    VALIDATION = "validation"
    PROVIDER_FORMAT = "provider_format"
    IMAGE_GENERATION = "image_generation"
    SIMULATION = "simulation"
    NETWORK_MISMATCH = "network_mismatch"
    SUBMISSION = "submission"
    ON_CHAIN_REVERT = "on_chain_revert"
    CONFIRMATION = "confirmation"
    BUSY = "busy"
    CANCELLED = "cancelled"
    UNEXPECTED = "unexpected"


TERMINAL_STATES = (MintState.CONFIRMED, MintState.FAILED)

# States where a transaction may be racing for the signer's nonce
IN_FLIGHT_STATES = (
    MintState.VALIDATING,
    MintState.BUILDING_METADATA,
    MintState.BUILDING_PAYLOAD,
    MintState.AWAITING_NETWORK_CHECK,
    MintState.SUBMITTING,
    MintState.AWAITING_CONFIRMATION,
)


@dataclass(frozen=True)
class MintRequest:
    """Validated user input for a mint"""
    display_title: str  # Always starts with the ticker marker, e.g. "$ART"
    caption: str
    image_url: str  # Hosted URL or data URI from the image provider

    @property
    def symbol(self) -> str:
        """Ticker without the marker"""
        return self.display_title[1:]


@dataclass(frozen=True)
class CoinMetadata:
    """Off-chain metadata embedded in the token's metadata URI"""
    name: str
    description: str
    image: Optional[str] = None

    def to_dict(self) -> Dict[str, str]:
        # Key order is part of the encoding
        data = {"name": self.name, "description": self.description}
        if self.image:
            data["image"] = self.image
        return data


@dataclass(frozen=True)
class SaleParameters:
    """Sale window, supply caps and price for a new coin"""
    sale_start: int  # unix seconds
    sale_end: int
    price_per_token: int  # wei
    max_tokens_per_address: int
    initial_supply: int
    max_supply: int
    funds_recipient: str


@dataclass(frozen=True)
class MintPayload:
    """Unsigned contract call produced by a payload builder"""
    to: str
    data: str  # 0x-prefixed calldata
    value: int = 0
    function_name: str = ""
    args: tuple = ()
    gas: Optional[int] = None  # set once simulation has estimated it

    def as_call(self, sender: str) -> Dict[str, Any]:
        """Transaction dict usable for eth_call / eth_sendTransaction"""
        call = {
            'from': sender,
            'to': self.to,
            'value': self.value,
            'data': self.data,
        }
        if self.gas:
            call['gas'] = self.gas
        return call


@dataclass
class MintAttempt:
    """One user-initiated mint, mutated only by the orchestrator"""
    state: MintState = MintState.IDLE
    request: Optional[MintRequest] = None
    metadata_uri: Optional[str] = None
    submitted_hash: Optional[str] = None
    receipt: Optional[Dict[str, Any]] = None
    created_contract_address: Optional[str] = None
    error_kind: Optional[ErrorKind] = None
    error_message: Optional[str] = None
    started_at: datetime = field(default_factory=datetime.now)
    finished_at: Optional[datetime] = None
    history: List[MintState] = field(default_factory=list)

    @property
    def is_terminal(self) -> bool:
        return self.state in TERMINAL_STATES

    @property
    def is_in_flight(self) -> bool:
        return self.state in IN_FLIGHT_STATES

    def to_dict(self) -> Dict[str, Any]:
        """JSON-friendly view for the presentation layer"""
        block_number = None
        if self.receipt is not None:
            block_number = self.receipt.get('blockNumber')
        return {
            'state': self.state.value,
            'title': self.request.display_title if self.request else None,
            'txHash': self.submitted_hash,
            'blockNumber': block_number,
            'contractAddress': self.created_contract_address,
            'errorKind': self.error_kind.value if self.error_kind else None,
            'errorMessage': self.error_message,
            'startedAt': self.started_at.isoformat(),
            'finishedAt': self.finished_at.isoformat() if self.finished_at else None,
        }
