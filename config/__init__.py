from .loader import ConfigError, load_config, get_config, reload_config
from .schema import OppscoreConfig, SectorTablesConfig

__all__ = [
    "ConfigError",
    "load_config",
    "get_config",
    "reload_config",
    "OppscoreConfig",
    "SectorTablesConfig",
]
