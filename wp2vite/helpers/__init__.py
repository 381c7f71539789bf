"""Shared helpers: logging, YAML settings, manifest I/O, Node bridge."""
