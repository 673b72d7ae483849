"""
py-empire: world generation and balanced start assignment for a turn-based
strategy game.
"""

__version__ = "0.1.0"
