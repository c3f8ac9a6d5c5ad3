"""Bundled implementations shipped with tessera."""
