"""
Monnayeur - identity, eligibility and session store for NFT minting.
"""

__version__ = "0.1.0"
