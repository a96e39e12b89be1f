#!/usr/bin/env python3
"""
AI Image & Coin Minter - web backend

Endpoints:
  POST /generate     {prompt}                  -> {imageUrl}
  POST /mint         {imageUrl, title, caption} -> {success, txHash, contractAddress}
  GET  /mint/status                             -> current attempt
  GET  /health

Usage:
- Set up your .env file with RPC_URL, PRIVATE_KEY, REPLICATE_API_TOKEN, etc.
- Run: python app.py
"""

import os

from aiohttp import web

from minter.config import Settings, setup_logging
from minter.web import create_app


def main():
    try:
        settings = Settings.from_env()
    except ValueError as e:
        print(f"\n❌ CONFIGURATION ERROR: {e}")
        print("   Please ensure you have a .env file with all required variables.")
        return

    logger = setup_logging(debug=settings.debug_logs)
    if not settings.replicate_api_token:
        logger.warning("REPLICATE_API_TOKEN not found. Image generation will not work.")

    host = os.getenv('HOST', '0.0.0.0')
    port = int(os.getenv('PORT', '5001'))

    print("🚀 AI IMAGE & COIN MINTER")
    print("=" * 50)
    print(f"🔗 Target chain: {settings.target_chain_id}")
    print(f"✍️  Signer: {settings.signer_mode}")
    print(f"🏭 Strategy: {settings.mint_strategy}")
    print(f"🌐 Listening on http://{host}:{port}")
    print("=" * 50)

    web.run_app(create_app(settings), host=host, port=port, print=None)


if __name__ == "__main__":
    main()
