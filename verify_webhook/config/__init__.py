"""
Config Module - Black Box Interface

Purpose: Application configuration management
Interface: ConfigProvider, EnvConfigProvider, WebhookConfig, APIConfig
Hidden: Environment parsing, defaults, service-account discovery
"""

from .provider import APIConfig, ConfigProvider, EnvConfigProvider, WebhookConfig

__all__ = ["APIConfig", "ConfigProvider", "EnvConfigProvider", "WebhookConfig"]
