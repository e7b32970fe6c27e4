"""Biometric attendance tracker backend: student registration and daily check-ins."""

from .app import create_app, main
from .config import Config, load_config

__all__ = ["create_app", "main", "Config", "load_config"]

__version__ = "1.0.0"
