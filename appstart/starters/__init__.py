"""Starter templates: built-in catalog, remote registry, manifests and the web wizard."""
