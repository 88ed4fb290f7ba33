"""Configuration package for the monitor daemon."""

from .loader import load_config
from .models import DatabaseConfig, MonitorConfig, PrometheusConfig, Settings

__all__ = [
    "DatabaseConfig",
    "MonitorConfig",
    "PrometheusConfig",
    "Settings",
    "load_config",
]
