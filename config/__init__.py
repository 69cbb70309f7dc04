"""Configuration package for the curiosity gate services."""
from .app import AppConfig, EvaluationSettings, ProviderRoute, load_config, resolve_route
from .patterns import PatternTables, pattern_tables
from .settings import Settings, settings

__all__ = [
    "AppConfig",
    "EvaluationSettings",
    "ProviderRoute",
    "load_config",
    "resolve_route",
    "PatternTables",
    "pattern_tables",
    "Settings",
    "settings",
]
