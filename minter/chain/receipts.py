"""
Receipt helpers: creation event lookup
"""

from typing import Any, Mapping, Optional

from eth_hash.auto import keccak
from eth_utils import to_checksum_address

# Signature topic plus newContract, creator and admin
CREATION_EVENT_TOPIC_COUNT = 4


def event_signature_hash(signature: str) -> str:
    """topic0 for a canonical event signature, 0x-prefixed lowercase hex"""
    return '0x' + keccak(signature.encode('utf-8')).hex()


def _topic_hex(topic: Any) -> str:
    if isinstance(topic, (bytes, bytearray)):
        return '0x' + bytes(topic).hex()
    topic = str(topic).lower()
    return topic if topic.startswith('0x') else '0x' + topic


def _address_from_topic(topic: Any) -> str:
    # Indexed address: last 20 bytes of the 32-byte topic
    return to_checksum_address('0x' + _topic_hex(topic)[-40:])


def find_created_contract(receipt: Mapping[str, Any], signature: Optional[str],
                          emitter: Optional[str] = None) -> Optional[str]:
    """Address of the contract announced by the creation event, or None

    A log only counts when topic0 is the event's signature hash and it
    carries exactly the three indexed topics; topic count alone is not
    enough. When an emitter is given the log must come from it.
    """
    if not signature:
        return None

    expected_topic = event_signature_hash(signature)
    for log in receipt.get('logs') or []:
        topics = log.get('topics') or []
        if len(topics) != CREATION_EVENT_TOPIC_COUNT:
            continue
        if _topic_hex(topics[0]) != expected_topic:
            continue
        if emitter and str(log.get('address', '')).lower() != emitter.lower():
            continue
        return _address_from_topic(topics[1])
    return None
