"""Core utilities: logging, security, exceptions."""
