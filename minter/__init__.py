"""
AI image to on-chain coin minter
"""

__version__ = "0.1.0"
