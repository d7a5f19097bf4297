"""Configuration, logging, loop statistics and overlays."""
