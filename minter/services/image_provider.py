"""
Image provider boundary: Replicate text-to-image predictions
"""

import asyncio
import base64
import logging
import time
from dataclasses import dataclass
from typing import Any, Optional, Union

import aiohttp

from minter.errors import ImageGenerationError, UnexpectedProviderFormatError

REPLICATE_PREDICTIONS_URL = "https://api.replicate.com/v1/predictions"
TERMINAL_STATUSES = ('succeeded', 'failed', 'canceled')


@dataclass(frozen=True)
class UrlOutput:
    """Provider already hosts the image"""
    url: str


@dataclass(frozen=True)
class InlineBinaryOutput:
    """Provider streamed raw image bytes"""
    data: bytes
    mime_type: str = "image/png"


@dataclass(frozen=True)
class UnrecognizedOutput:
    reason: str


ProviderOutput = Union[UrlOutput, InlineBinaryOutput, UnrecognizedOutput]


def _sniff_mime_type(data: bytes) -> str:
    if data.startswith(b'\xff\xd8\xff'):
        return "image/jpeg"
    if data[:4] == b'RIFF' and data[8:12] == b'WEBP':
        return "image/webp"
    return "image/png"


def classify_output(output: Any) -> ProviderOutput:
    """Decide once what shape the provider returned

    A list is judged by its first element; a bare string or bytes value
    is treated as a single-element list.
    """
    if isinstance(output, (list, tuple)):
        if not output:
            return UnrecognizedOutput("empty output list")
        first = output[0]
    else:
        first = output

    if isinstance(first, str):
        if first.strip():
            return UrlOutput(first.strip())
        return UnrecognizedOutput("empty string output")

    if isinstance(first, (bytes, bytearray, memoryview)):
        data = bytes(first)
        if data:
            return InlineBinaryOutput(data, _sniff_mime_type(data))
        return UnrecognizedOutput("empty binary output")

    return UnrecognizedOutput(f"unexpected output type {type(first).__name__}")


def to_image_url(output: ProviderOutput) -> str:
    """Turn a classified output into something an <img> tag can show"""
    if isinstance(output, UrlOutput):
        return output.url
    if isinstance(output, InlineBinaryOutput):
        encoded = base64.b64encode(output.data).decode('ascii')
        return f"data:{output.mime_type};base64,{encoded}"
    if isinstance(output, UnrecognizedOutput):
        raise UnexpectedProviderFormatError(
            f"Failed to generate image. Unexpected output format received from provider: {output.reason}"
        )
    raise UnexpectedProviderFormatError(f"Unknown provider output {output!r}")


class ReplicateImageProvider:
    """Generates images through the Replicate predictions API"""

    def __init__(self, api_token: Optional[str], model_version: str,
                 max_wait: float = 120, poll_interval: float = 1.0,
                 api_url: str = REPLICATE_PREDICTIONS_URL):
        self.api_token = api_token
        self.api_url = api_url
        self.model_version = model_version
        self.max_wait = max_wait
        self.poll_interval = poll_interval
        self.logger = logging.getLogger('coin_minter')

    @property
    def is_configured(self) -> bool:
        return bool(self.api_token)

    def _headers(self) -> dict:
        return {
            "Authorization": f"Bearer {self.api_token}",
            "Content-Type": "application/json",
            "Prefer": "wait",
        }

    async def generate(self, prompt: str) -> str:
        """Run a prediction for the prompt and return an image URL or data URI"""
        if not self.is_configured:
            raise ImageGenerationError("Replicate API token not configured.")
        if not prompt or not prompt.strip():
            raise ImageGenerationError("Prompt is required")

        self.logger.info(f"Generating image with prompt: {prompt[:80]}")
        payload = {"version": self.model_version, "input": {"prompt": prompt}}

        try:
            async with aiohttp.ClientSession(headers=self._headers()) as session:
                async with session.post(self.api_url, json=payload) as response:
                    if response.status not in (200, 201):
                        detail = await response.text()
                        raise ImageGenerationError(
                            f"Failed to generate image: HTTP {response.status} {detail[:200]}"
                        )
                    prediction = await response.json()

                prediction = await self._wait_for_prediction(session, prediction)
        except aiohttp.ClientError as e:
            raise ImageGenerationError(f"Failed to generate image: {e}") from e

        status = prediction.get('status')
        if status != 'succeeded':
            error = prediction.get('error') or status
            raise ImageGenerationError(f"Failed to generate image: prediction {error}")

        output = classify_output(prediction.get('output'))
        self.logger.debug(f"Replicate output classified as {type(output).__name__}")
        return to_image_url(output)

    async def _wait_for_prediction(self, session: aiohttp.ClientSession, prediction: dict) -> dict:
        """Poll the prediction until it reaches a terminal status"""
        deadline = time.monotonic() + self.max_wait
        poll_url = (prediction.get('urls') or {}).get('get')

        while prediction.get('status') not in TERMINAL_STATUSES:
            if not poll_url:
                raise ImageGenerationError("Prediction is still running but has no polling URL")
            if time.monotonic() > deadline:
                raise ImageGenerationError(f"Image generation timed out after {self.max_wait:.0f}s")

            await asyncio.sleep(self.poll_interval)
            async with session.get(poll_url) as response:
                if response.status != 200:
                    raise ImageGenerationError(f"Failed to poll prediction: HTTP {response.status}")
                prediction = await response.json()

        return prediction
