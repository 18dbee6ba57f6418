"""Blackdot core library: feature registry and layered configuration."""

from . import exceptions  # noqa: F401

__all__ = ["exceptions"]
