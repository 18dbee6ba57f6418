"""
Blackdot - feature registry and layered configuration resolver

Blackdot answers two questions for the rest of a dotfiles setup: which
capabilities are enabled right now, and what the effective value of a
setting is (and which layer supplied it).
"""

__version__ = "1.0.0"
__all__ = ["__version__"]
