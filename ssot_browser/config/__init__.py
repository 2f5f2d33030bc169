from .loader import load_global_config
from .model import RESOURCE_TYPES, GlobalConfig, ResourceConfig

__all__ = ["load_global_config", "GlobalConfig", "ResourceConfig", "RESOURCE_TYPES"]
