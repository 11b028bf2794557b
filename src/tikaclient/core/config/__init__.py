"""Configuration: the ServiceConfig model, env loading and layered .env files."""

from tikaclient.core.config.models import ServiceConfig

__all__ = ["ServiceConfig"]
