"""
Per-user session: the generated image plus the single current mint attempt
"""

import logging
from typing import Any, Dict, Optional

from minter.chain import build_gateway, build_payload_builder
from minter.config import Settings
from minter.errors import MintInProgressError
from minter.models import MintAttempt, MintState
from minter.orchestrator import MintOrchestrator
from minter.services.image_provider import ReplicateImageProvider

PENDING_NOTICE = (
    "Your transaction was broadcast. If you leave now it may still be mined; "
    "check the explorer link for its final status."
)


class MintSession:
    """What the page shows: prompt, image, and the latest mint attempt"""

    def __init__(self, image_provider: ReplicateImageProvider, orchestrator: MintOrchestrator,
                 settings: Settings):
        self.image_provider = image_provider
        self.orchestrator = orchestrator
        self.settings = settings
        self.logger = logging.getLogger('coin_minter')

        self.prompt: Optional[str] = None
        self.image_url: Optional[str] = None

    @property
    def attempt(self) -> Optional[MintAttempt]:
        return self.orchestrator.attempt

    async def generate(self, prompt: str) -> str:
        """Generate a new image; clears the previous image and attempt first"""
        if self.orchestrator.is_busy:
            raise MintInProgressError("Wait for the current mint to finish before generating a new image")

        self.orchestrator.reset()
        self.prompt = prompt
        self.image_url = None

        self.image_url = await self.image_provider.generate(prompt)
        return self.image_url

    async def mint(self, title: str, caption: str, image_url: Optional[str] = None) -> MintAttempt:
        """Mint the given image (or the last generated one)"""
        return await self.orchestrator.mint(title, caption, image_url or self.image_url or "")

    def snapshot(self) -> Dict[str, Any]:
        attempt = self.attempt
        data = {
            'prompt': self.prompt,
            'imageUrl': self.image_url,
            'mint': attempt.to_dict() if attempt else {'state': MintState.IDLE.value},
            'explorerUrl': None,
            'notice': None,
        }
        if attempt and attempt.submitted_hash:
            data['explorerUrl'] = self.settings.explorer_link(attempt.submitted_hash)
            if attempt.state != MintState.CONFIRMED:
                data['notice'] = PENDING_NOTICE
        return data


def build_session(settings: Settings) -> MintSession:
    """Wire provider, gateway and orchestrator; called once at startup"""
    image_provider = ReplicateImageProvider(
        settings.replicate_api_token,
        settings.replicate_model_version,
    )
    orchestrator = MintOrchestrator(
        build_gateway(settings),
        build_payload_builder(settings),
        settings,
    )
    return MintSession(image_provider, orchestrator, settings)
