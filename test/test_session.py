"""
Session: regenerate clears the previous attempt; snapshots for the page
"""

import asyncio

import pytest

from conftest import TX_HASH
from minter.errors import ConfirmationError, ImageGenerationError, MintInProgressError
from minter.models import MintState


def test_generate_then_mint_uses_generated_image(session, gateway):
    async def scenario():
        await session.generate("a cat in space")
        return await session.mint("$CAT", "space cat")

    attempt = asyncio.run(scenario())
    assert attempt.state == MintState.CONFIRMED
    assert attempt.request.image_url == "https://x/img.png"


def test_mint_without_image_is_validation_error(session, gateway):
    attempt = asyncio.run(session.mint("$CAT", "space cat"))
    assert attempt.state == MintState.FAILED
    assert attempt.error_kind.value == "validation"
    assert gateway.calls == []


def test_regenerate_discards_previous_attempt(session):
    async def scenario():
        await session.generate("a cat")
        await session.mint("$CAT", "space cat")
        assert session.attempt is not None
        await session.generate("a dog")

    asyncio.run(scenario())
    assert session.attempt is None
    assert session.prompt == "a dog"
    assert session.snapshot()['mint'] == {'state': 'idle'}


def test_failed_generation_clears_image(session, image_provider):
    async def scenario():
        await session.generate("a cat")
        image_provider.error = ImageGenerationError("prediction failed")
        with pytest.raises(ImageGenerationError):
            await session.generate("a dog")

    asyncio.run(scenario())
    assert session.image_url is None


def test_generate_rejected_while_minting(session, gateway):
    async def scenario():
        await session.generate("a cat")
        gateway.release_submit = asyncio.Event()
        task = asyncio.create_task(session.mint("$CAT", "space cat"))
        while 'submit' not in gateway.calls:
            await asyncio.sleep(0)
        with pytest.raises(MintInProgressError):
            await session.generate("a dog")
        gateway.release_submit.set()
        return await task

    attempt = asyncio.run(scenario())
    assert attempt.state == MintState.CONFIRMED
    assert session.image_url == "https://x/img.png"


def test_snapshot_links_explorer_and_warns_when_unconfirmed(session, gateway):
    gateway.receipt_error = ConfirmationError("Status unknown, check the explorer.", tx_hash=TX_HASH)

    async def scenario():
        await session.generate("a cat")
        await session.mint("$CAT", "space cat")

    asyncio.run(scenario())
    snapshot = session.snapshot()
    assert snapshot['mint']['state'] == 'failed'
    assert snapshot['mint']['errorKind'] == 'confirmation'
    assert snapshot['explorerUrl'] == f"https://sepolia.basescan.org/tx/{TX_HASH}"
    assert "may still be mined" in snapshot['notice']


def test_snapshot_after_confirmation(session):
    async def scenario():
        await session.generate("a cat")
        await session.mint("$CAT", "space cat")

    asyncio.run(scenario())
    snapshot = session.snapshot()
    assert snapshot['mint']['state'] == 'confirmed'
    assert snapshot['mint']['contractAddress'] is not None
    assert snapshot['mint']['blockNumber'] == 123
    assert snapshot['notice'] is None
