"""
Dmoney E2E — end-to-end transaction suite for the Dmoney mobile-money API.

Creates customers, an agent and a merchant on a live platform, moves money
between them, and verifies the final balance of one transaction chain.
"""

__version__ = "0.1.0"
