"""Configuration extraction and synthesis engine."""
