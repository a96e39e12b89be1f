"""
HTTP routes against a session wired with test doubles
"""

import asyncio

from aiohttp.test_utils import TestClient, TestServer

from conftest import TX_HASH, receipt
from minter.errors import ImageGenerationError
from minter.web import create_app


def call(settings, session, method, path, **kwargs):
    async def scenario():
        app = create_app(settings, session=session)
        async with TestClient(TestServer(app)) as client:
            response = await client.request(method, path, **kwargs)
            return response.status, await response.json()

    return asyncio.run(scenario())


def test_generate_returns_image_url(settings, session):
    status, body = call(settings, session, 'POST', '/generate', json={"prompt": "a cat"})
    assert status == 200
    assert body == {"imageUrl": "https://x/img.png"}


def test_generate_requires_prompt(settings, session, image_provider):
    status, body = call(settings, session, 'POST', '/generate', json={})
    assert status == 400
    assert body["error"] == "Prompt is required"
    assert image_provider.prompts == []


def test_generate_rejects_non_json(settings, session):
    status, body = call(settings, session, 'POST', '/generate', data="not json",
                        headers={'Content-Type': 'application/json'})
    assert status == 400
    assert "JSON" in body["error"]


def test_generate_unconfigured_provider(settings, session, image_provider):
    image_provider.configured = False
    status, body = call(settings, session, 'POST', '/generate', json={"prompt": "a cat"})
    assert status == 500
    assert "not configured" in body["error"]


def test_generate_provider_failure(settings, session, image_provider):
    image_provider.error = ImageGenerationError("Failed to generate image: prediction failed")
    status, body = call(settings, session, 'POST', '/generate', json={"prompt": "a cat"})
    assert status == 500
    assert body["errorKind"] == "image_generation"


def test_mint_success(settings, session):
    status, body = call(settings, session, 'POST', '/mint',
                        json={"imageUrl": "https://x/img.png", "title": "$ART", "caption": "first piece"})
    assert status == 200
    assert body["success"] is True
    assert body["txHash"] == TX_HASH
    assert body["contractAddress"] == "0x2222222222222222222222222222222222222222"
    assert body["explorerUrl"].endswith(TX_HASH)


def test_mint_validation_error(settings, session, gateway):
    status, body = call(settings, session, 'POST', '/mint',
                        json={"imageUrl": "https://x/img.png", "title": "ART", "caption": "x"})
    assert status == 400
    assert body["errorKind"] == "validation"
    assert gateway.calls == []


def test_mint_missing_fields(settings, session):
    status, body = call(settings, session, 'POST', '/mint', json={"title": "$ART"})
    assert status == 400
    assert "imageUrl" in body["error"]


def test_mint_on_chain_revert(settings, session, gateway):
    gateway.receipt = receipt(status=0)
    status, body = call(settings, session, 'POST', '/mint',
                        json={"imageUrl": "https://x/img.png", "title": "$ART", "caption": "first piece"})
    assert status == 502
    assert body["errorKind"] == "on_chain_revert"
    assert body["txHash"] == TX_HASH


def test_mint_status_and_health(settings, session):
    status, body = call(settings, session, 'GET', '/mint/status')
    assert status == 200
    assert body["mint"] == {"state": "idle"}

    status, body = call(settings, session, 'GET', '/health')
    assert body == {"status": "ok", "chainId": 84532}


def test_mint_non_text_title_is_validation_error(settings, session, gateway):
    status, body = call(settings, session, 'POST', '/mint',
                        json={"imageUrl": "https://x/img.png", "title": 123, "caption": "first piece"})
    assert status == 400
    assert body["errorKind"] == "validation"
    assert gateway.calls == []

    status, body = call(settings, session, 'GET', '/mint/status')
    assert body["mint"]["state"] == "failed"


def test_generate_non_text_prompt(settings, session, image_provider):
    status, body = call(settings, session, 'POST', '/generate', json={"prompt": 123})
    assert status == 400
    assert body["error"] == "Prompt is required"
    assert image_provider.prompts == []
