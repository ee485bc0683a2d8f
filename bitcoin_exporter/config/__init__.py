from .loader import DEFAULT_CONFIG_PATH, Config, load_config

__all__ = ["DEFAULT_CONFIG_PATH", "Config", "load_config"]
