"""
HTTP surface: /generate, /mint, /mint/status and /health
"""

import json
import logging
from typing import Optional

from aiohttp import web

from minter.config import Settings
from minter.errors import MintError, MintInProgressError
from minter.models import ErrorKind, MintState
from minter.session import MintSession, build_session

SESSION_KEY = web.AppKey('session', MintSession)
SETTINGS_KEY = web.AppKey('settings', Settings)

logger = logging.getLogger('coin_minter')


async def _read_json(request: web.Request) -> dict:
    try:
        data = await request.json()
    except json.JSONDecodeError:
        raise web.HTTPBadRequest(
            text=json.dumps({"error": "Request body must be JSON"}),
            content_type='application/json',
        )
    return data if isinstance(data, dict) else {}


async def generate(request: web.Request) -> web.Response:
    session = request.app[SESSION_KEY]
    data = await _read_json(request)
    prompt = data.get('prompt')
    if not isinstance(prompt, str):
        prompt = ''
    prompt = prompt.strip()

    if not prompt:
        return web.json_response({"error": "Prompt is required"}, status=400)
    if not session.image_provider.is_configured:
        return web.json_response({"error": "Replicate API token not configured."}, status=500)

    try:
        image_url = await session.generate(prompt)
    except MintInProgressError as e:
        return web.json_response(e.to_dict(), status=409)
    except MintError as e:
        logger.error(f"Generation error: {e.message}")
        return web.json_response(e.to_dict(), status=500)

    return web.json_response({"imageUrl": image_url})


async def mint(request: web.Request) -> web.Response:
    session = request.app[SESSION_KEY]
    settings = request.app[SETTINGS_KEY]
    data = await _read_json(request)

    try:
        attempt = await session.mint(
            data.get('title') or '',
            data.get('caption') or '',
            data.get('imageUrl') or '',
        )
    except MintInProgressError as e:
        return web.json_response(e.to_dict(), status=409)

    explorer_url = settings.explorer_link(attempt.submitted_hash)
    if attempt.state == MintState.CONFIRMED:
        return web.json_response({
            "success": True,
            "txHash": attempt.submitted_hash,
            "contractAddress": attempt.created_contract_address,
            "explorerUrl": explorer_url,
        })

    body = {
        "error": attempt.error_message,
        "errorKind": attempt.error_kind.value if attempt.error_kind else None,
    }
    if attempt.submitted_hash:
        body["txHash"] = attempt.submitted_hash
        body["explorerUrl"] = explorer_url
    status = 400 if attempt.error_kind == ErrorKind.VALIDATION else 502
    return web.json_response(body, status=status)


async def mint_status(request: web.Request) -> web.Response:
    return web.json_response(request.app[SESSION_KEY].snapshot())


async def health(request: web.Request) -> web.Response:
    settings = request.app[SETTINGS_KEY]
    return web.json_response({"status": "ok", "chainId": settings.target_chain_id})


def create_app(settings: Settings, session: Optional[MintSession] = None) -> web.Application:
    """Build the web application; the session is created here, not at import"""
    app = web.Application()
    app[SETTINGS_KEY] = settings
    app[SESSION_KEY] = session or build_session(settings)

    app.router.add_post('/generate', generate)
    app.router.add_post('/mint', mint)
    app.router.add_get('/mint/status', mint_status)
    app.router.add_get('/health', health)
    return app
