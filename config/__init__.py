from .paths import PATHS
from .settings import CONFIG, Config, ConfigurationError, RunSettings, load_config

__all__ = ["PATHS", "CONFIG", "Config", "ConfigurationError", "RunSettings", "load_config"]
