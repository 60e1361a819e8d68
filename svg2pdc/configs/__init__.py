"""Converter configuration (``converter.yaml``) and its loader."""

from svg2pdc.configs.loader import ConfigError, ConverterConfig, load_config

__all__ = ["ConfigError", "ConverterConfig", "load_config"]
