"""Configuration management for txrepair.

This module handles loading, validating, and providing access to
txrepair configuration settings. Configuration can come from:
- Default values
- A TOML configuration file
- Command-line arguments (applied by the CLI on top of the file)

Example:
    >>> from txrepair.config import Config
    >>> config = Config.load("txrepair.toml")
    >>> config.extension.max_exon_extension
    100000

A configuration file mirrors the attribute layout::

    [extension]
    max_exon_extension = 50000

    [parallel]
    max_workers = 4
    backend = "processes"
"""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Any

import attrs

# =============================================================================
# Default Configuration Values
# =============================================================================

# Extension defaults
DEFAULT_MAX_EXON_EXTENSION = 100_000  # Base pairs

# Parallel processing defaults
DEFAULT_MAX_WORKERS = 1
DEFAULT_BACKEND = "processes"

BACKENDS = ("serial", "threads", "processes")


# =============================================================================
# Configuration Classes
# =============================================================================


@attrs.define
class ExtensionConfig:
    """Configuration for transcript extension.

    Attributes:
        max_exon_extension: Maximum number of bases a truncated transcript
            may diverge from the reference at the extended end.
    """

    max_exon_extension: int = attrs.field(
        default=DEFAULT_MAX_EXON_EXTENSION,
        validator=[attrs.validators.instance_of(int), attrs.validators.ge(0)],
    )


@attrs.define
class ParallelConfig:
    """Configuration for parallel processing.

    Attributes:
        max_workers: Maximum number of parallel workers.
        backend: Execution backend (serial, threads, processes).
    """

    max_workers: int = attrs.field(
        default=DEFAULT_MAX_WORKERS,
        validator=[attrs.validators.instance_of(int), attrs.validators.ge(1)],
    )
    backend: str = attrs.field(
        default=DEFAULT_BACKEND,
        validator=attrs.validators.in_(BACKENDS),
    )


@attrs.define
class Config:
    """Main configuration container for txrepair.

    Attributes:
        extension: Transcript extension configuration.
        parallel: Parallel processing configuration.
    """

    extension: ExtensionConfig = attrs.Factory(ExtensionConfig)
    parallel: ParallelConfig = attrs.Factory(ParallelConfig)

    @classmethod
    def load(cls, path: Path | str | None = None) -> Config:
        """Load configuration from file.

        Args:
            path: Path to a TOML configuration file.
                  If None, returns default configuration.

        Returns:
            Loaded configuration object.

        Raises:
            FileNotFoundError: If configuration file doesn't exist.
            ValueError: If configuration file is invalid.
        """
        if path is None:
            return cls()

        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        try:
            with open(path, "rb") as f:
                data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ValueError(f"Invalid configuration file {path}: {e}") from e

        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Config:
        """Build configuration from a nested dictionary.

        Raises:
            ValueError: On unknown sections or keys, or invalid values.
        """
        sections = {"extension": ExtensionConfig, "parallel": ParallelConfig}

        unknown = set(data) - set(sections)
        if unknown:
            raise ValueError(f"Unknown configuration section(s): {', '.join(sorted(unknown))}")

        kwargs = {}
        for name, section_cls in sections.items():
            values = data.get(name, {})
            if not isinstance(values, dict):
                raise ValueError(f"Configuration section [{name}] must be a table, got {values!r}")
            fields = {f.name for f in attrs.fields(section_cls)}
            bad = set(values) - fields
            if bad:
                raise ValueError(f"Unknown key(s) in [{name}]: {', '.join(sorted(bad))}")
            try:
                kwargs[name] = section_cls(**values)
            except TypeError as e:
                raise ValueError(f"Invalid value in [{name}]: {e}") from e

        return cls(**kwargs)

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to dictionary.

        Returns:
            Dictionary representation of configuration.
        """
        return attrs.asdict(self)
