"""
Environment configuration and logging setup
"""

import os
import logging
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

# Zora deployments on Base Sepolia
DEFAULT_CHAIN_ID = 84532
DEFAULT_CREATOR_FACTORY = "0x777777C338d93e2C7adf08D102d45CA7CC4Ed021"
DEFAULT_FIXED_PRICE_STRATEGY = "0x04E2516A2c207E84a1839755675dfd8eF6302F0a"
DEFAULT_EXPLORER_TX_URL = "https://sepolia.basescan.org/tx/"

# Stable Diffusion v1.5 on Replicate
DEFAULT_REPLICATE_MODEL = "db21e45d3f7023abc2a46ee38a23973f6dce16bb082a930b0c49861f96d1e5bf"

LOGGER_NAME = 'coin_minter'

SIGNER_MODES = ('server', 'wallet')
MINT_STRATEGIES = ('creator_factory', 'erc20')


def _env_bool(name: str, default: str = 'false') -> bool:
    return os.getenv(name, default).lower() == 'true'


@dataclass
class Settings:
    """Runtime configuration, loaded once at startup"""
    rpc_url: str
    target_chain_id: int = DEFAULT_CHAIN_ID
    signer_mode: str = 'server'
    private_key: Optional[str] = None
    wallet_rpc_url: Optional[str] = None
    mint_strategy: str = 'creator_factory'
    creator_factory_address: str = DEFAULT_CREATOR_FACTORY
    fixed_price_strategy_address: str = DEFAULT_FIXED_PRICE_STRATEGY
    erc20_minter_address: Optional[str] = None
    replicate_api_token: Optional[str] = None
    replicate_model_version: str = DEFAULT_REPLICATE_MODEL
    explorer_tx_url: str = DEFAULT_EXPLORER_TX_URL
    sale_duration_days: int = 7
    max_tokens_per_address: int = 1
    price_per_token_wei: int = 0
    initial_supply: int = 1000
    max_supply: int = 10000
    metadata_include_image: bool = False
    receipt_timeout: float = 300
    receipt_poll_interval: float = 2
    debug_logs: bool = False

    @classmethod
    def from_env(cls, require_signer: bool = True) -> 'Settings':
        """Load configuration from environment (.env is read first)"""
        load_dotenv()

        signer_mode = os.getenv('SIGNER_MODE', 'server').lower()
        if signer_mode not in SIGNER_MODES:
            raise ValueError(f"SIGNER_MODE must be one of {SIGNER_MODES}, got {signer_mode!r}")

        mint_strategy = os.getenv('MINT_STRATEGY', 'creator_factory').lower()
        if mint_strategy not in MINT_STRATEGIES:
            raise ValueError(f"MINT_STRATEGY must be one of {MINT_STRATEGIES}, got {mint_strategy!r}")

        rpc_url = os.getenv('RPC_URL') or os.getenv('ALCHEMY_RPC_URL')

        missing = []
        if not rpc_url:
            missing.append('RPC_URL')
        if require_signer:
            if signer_mode == 'server' and not os.getenv('PRIVATE_KEY'):
                missing.append('PRIVATE_KEY')
            if signer_mode == 'wallet' and not os.getenv('WALLET_RPC_URL'):
                missing.append('WALLET_RPC_URL')
        if mint_strategy == 'erc20' and not os.getenv('ERC20_MINTER_ADDRESS'):
            missing.append('ERC20_MINTER_ADDRESS')
        if missing:
            raise ValueError(f"Missing required environment variables: {missing}")

        return cls(
            rpc_url=rpc_url,
            target_chain_id=int(os.getenv('TARGET_CHAIN_ID', str(DEFAULT_CHAIN_ID))),
            signer_mode=signer_mode,
            private_key=os.getenv('PRIVATE_KEY'),
            wallet_rpc_url=os.getenv('WALLET_RPC_URL'),
            mint_strategy=mint_strategy,
            creator_factory_address=os.getenv('CREATOR_FACTORY_ADDRESS', DEFAULT_CREATOR_FACTORY),
            fixed_price_strategy_address=os.getenv('FIXED_PRICE_STRATEGY_ADDRESS', DEFAULT_FIXED_PRICE_STRATEGY),
            erc20_minter_address=os.getenv('ERC20_MINTER_ADDRESS'),
            replicate_api_token=os.getenv('REPLICATE_API_TOKEN'),
            replicate_model_version=os.getenv('REPLICATE_MODEL_VERSION', DEFAULT_REPLICATE_MODEL),
            explorer_tx_url=os.getenv('EXPLORER_TX_URL', DEFAULT_EXPLORER_TX_URL),
            sale_duration_days=int(os.getenv('SALE_DURATION_DAYS', '7')),
            max_tokens_per_address=int(os.getenv('MAX_TOKENS_PER_ADDRESS', '1')),
            price_per_token_wei=int(os.getenv('PRICE_PER_TOKEN_WEI', '0')),
            initial_supply=int(os.getenv('INITIAL_SUPPLY', '1000')),
            max_supply=int(os.getenv('MAX_SUPPLY', '10000')),
            metadata_include_image=_env_bool('METADATA_INCLUDE_IMAGE'),
            receipt_timeout=float(os.getenv('RECEIPT_TIMEOUT', '300')),
            receipt_poll_interval=float(os.getenv('RECEIPT_POLL_INTERVAL', '2')),
            debug_logs=_env_bool('DEBUG_LOGS'),
        )

    def explorer_link(self, tx_hash: Optional[str]) -> Optional[str]:
        if not tx_hash:
            return None
        return f"{self.explorer_tx_url}{tx_hash}"


def setup_logging(debug: bool = False, log_dir: str = 'logs') -> logging.Logger:
    """Setup logging: file at DEBUG, console at INFO"""
    logger = logging.getLogger(LOGGER_NAME)
    if logger.handlers:
        return logger

    os.makedirs(log_dir, exist_ok=True)
    logger.setLevel(logging.DEBUG)

    file_handler = logging.FileHandler(os.path.join(log_dir, 'minter.log'), encoding='utf-8')
    file_handler.setLevel(logging.DEBUG)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.DEBUG if debug else logging.INFO)

    formatter = logging.Formatter(
        '%(asctime)s | %(levelname)s | %(message)s'
    )
    file_handler.setFormatter(formatter)
    console_handler.setFormatter(formatter)

    logger.addHandler(file_handler)
    logger.addHandler(console_handler)

    # aiohttp access logs are noisy at INFO
    logging.getLogger("aiohttp.access").setLevel(logging.WARNING)
    return logger
