"""Bundled task catalog."""
