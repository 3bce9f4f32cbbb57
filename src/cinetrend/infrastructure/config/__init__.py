from __future__ import annotations

from .load import load_config
from .schema import AppConfig, AppwriteConfig, EnvOverrides

__all__ = ["AppConfig", "AppwriteConfig", "EnvOverrides", "load_config"]
