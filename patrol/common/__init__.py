"""Shared helpers used across the moderation packages."""
