"""Bundled file templates."""
