"""Public configuration API."""

from .loader import ConfigFiles, load_config_bundle
from .models import CallConfig, ConfigBundle, GenesisObject

__all__ = [
    "ConfigFiles",
    "ConfigBundle",
    "CallConfig",
    "GenesisObject",
    "load_config_bundle",
]
