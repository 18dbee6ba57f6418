"""Shared utilities for Blackdot core."""
