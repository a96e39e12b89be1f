#!/usr/bin/env python3
"""
AI Image & Coin Minter - standalone script
Generate an image from a prompt, then mint it as a new coin.

Usage:
- Set up your .env file (RPC_URL, SIGNER_MODE, PRIVATE_KEY or WALLET_RPC_URL,
  REPLICATE_API_TOKEN)
- Run: python coin_minter.py
"""

import asyncio

from minter.config import Settings, setup_logging
from minter.errors import MintError
from minter.models import MintAttempt, MintState
from minter.services.metadata import build_metadata, decode_metadata_uri, encode_metadata_uri, validate_request
from minter.session import build_session

STATE_MARKERS = {
    MintState.VALIDATING: "🔎 Validating input...",
    MintState.BUILDING_METADATA: "📄 Building metadata...",
    MintState.BUILDING_PAYLOAD: "🔧 Building and simulating transaction...",
    MintState.AWAITING_NETWORK_CHECK: "🔀 Wrong network, asking wallet to switch...",
    MintState.SUBMITTING: "✍️  Waiting for signature...",
    MintState.AWAITING_CONFIRMATION: "⏳ Waiting for confirmation...",
}


def print_progress(attempt: MintAttempt):
    marker = STATE_MARKERS.get(attempt.state)
    if marker:
        print(marker)
    if attempt.state == MintState.AWAITING_CONFIRMATION and attempt.submitted_hash:
        print(f"📤 Transaction sent: {attempt.submitted_hash}")


async def main():
    """Interactive generate-then-mint flow"""
    try:
        settings = Settings.from_env()
    except ValueError as e:
        print(f"\n❌ CONFIGURATION ERROR: {e}")
        print("   Please ensure you have a .env file with all required variables.")
        return

    setup_logging(debug=settings.debug_logs)
    session = build_session(settings)
    session.orchestrator.add_listener(print_progress)

    prompt = input("🎨 Prompt: ").strip()
    try:
        image_url = await session.generate(prompt)
    except MintError as e:
        print(f"\n❌ GENERATION FAILED: {e.message}")
        return
    print(f"🖼️  Image: {image_url[:100]}{'...' if len(image_url) > 100 else ''}")

    title = input("🏷️  Title ($ticker): ").strip()
    caption = input("💬 Caption: ").strip()

    # Preview without touching the chain
    try:
        request = validate_request(title, caption, image_url)
    except MintError as e:
        print(f"\n❌ {e.message}")
        return
    metadata_uri = encode_metadata_uri(build_metadata(request, settings.metadata_include_image))

    print(f"\n🎯 MINT READY!")
    print(f"   Title: {request.display_title}")
    print(f"   Caption: {request.caption}")
    print(f"   Metadata: {decode_metadata_uri(metadata_uri)}")
    print(f"   Chain: {settings.target_chain_id} ({settings.signer_mode} signer)")

    confirm = input("\n⚠️  This will send a real transaction! Continue? (y/N): ")
    if confirm.lower() != 'y':
        print("❌ Mint cancelled")
        return

    attempt = await session.mint(title, caption)

    if attempt.state == MintState.CONFIRMED:
        print("\n🎉 MINT SUCCESSFUL!")
        if attempt.created_contract_address:
            print(f"   Contract Address: {attempt.created_contract_address}")
        print(f"   Transaction Hash: {attempt.submitted_hash}")
        print(f"   Explorer: {settings.explorer_link(attempt.submitted_hash)}")
    else:
        print(f"\n❌ MINT FAILED ({attempt.error_kind.value}): {attempt.error_message}")
        if attempt.submitted_hash:
            print(f"   Explorer: {settings.explorer_link(attempt.submitted_hash)}")


if __name__ == "__main__":
    asyncio.run(main())
