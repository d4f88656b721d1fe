"""Configuration module for backend-resources."""
from .settings import AppConfig, load_settings

__all__ = ["AppConfig", "load_settings"]
