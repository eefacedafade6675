"""Configuration rules for synth."""

from rules.config import (
    CONFIG_FILENAME,
    ConfigError,
    DocsConfig,
    ManifestDefaults,
    SynthConfig,
    load_config,
    resolve_output_dir,
)

__all__ = [
    "CONFIG_FILENAME",
    "ConfigError",
    "DocsConfig",
    "ManifestDefaults",
    "SynthConfig",
    "load_config",
    "resolve_output_dir",
]
