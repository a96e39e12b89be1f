"""
Error taxonomy for image generation and minting
"""

from typing import Optional

from minter.models import ErrorKind


class MintError(Exception):
    """Base error; every failure carries a kind and a readable message

    Raise a subclass. The base kind only marks a failure no step claimed.
    """

    kind = ErrorKind.UNEXPECTED

    def __init__(self, message: str, tx_hash: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.tx_hash = tx_hash

    def to_dict(self) -> dict:
        data = {'error': self.message, 'errorKind': self.kind.value}
        if self.tx_hash:
            data['txHash'] = self.tx_hash
        return data


class ValidationError(MintError):
    """Bad input; no external call was made"""
    kind = ErrorKind.VALIDATION


class UnexpectedProviderFormatError(MintError):
    """Image provider returned an output shape we do not understand"""
    kind = ErrorKind.PROVIDER_FORMAT


class ImageGenerationError(MintError):
    """Image provider request failed or the prediction did not succeed"""
    kind = ErrorKind.IMAGE_GENERATION


class SimulationError(MintError):
    """Payload could not be built or reverted in simulation; nothing was sent"""
    kind = ErrorKind.SIMULATION


class NetworkMismatchError(MintError):
    """Signer is on the wrong chain and did not switch"""
    kind = ErrorKind.NETWORK_MISMATCH


class SubmissionError(MintError):
    """Signature rejected or RPC refused the transaction"""
    kind = ErrorKind.SUBMISSION


class OnChainRevertError(MintError):
    """Transaction was mined but reverted"""
    kind = ErrorKind.ON_CHAIN_REVERT


class ConfirmationError(MintError):
    """Final status unknown; the transaction may still land"""
    kind = ErrorKind.CONFIRMATION


class MintInProgressError(MintError):
    """Another mint is already running for this signer"""
    kind = ErrorKind.BUSY


class MintCancelledError(MintError):
    """The session stopped watching the attempt"""
    kind = ErrorKind.CANCELLED
