"""
Configuration loading and validation for cachelink.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Optional

import yaml

from .errors import CacheConfigError


KeyFunction = Callable[[str], str]

_GRAPHQL_NAME = re.compile(r"^[_A-Za-z][_0-9A-Za-z]*$")
_PROBE_TYPENAME = "Probe"

REDIS_URL_ENV = "CACHELINK_REDIS_URL"


def default_cache_read_key(typename: str) -> str:
    return f"all{typename}"


def default_cache_remove_key(typename: str) -> str:
    return f"remove{typename}"


def default_connection_typename(typename: str) -> str:
    return f"All{typename}Connection"


def _pattern_function(pattern: str, option: str) -> KeyFunction:
    if "{typename}" not in pattern:
        raise CacheConfigError(f"{option} pattern must contain '{{typename}}': {pattern!r}")

    def key_function(typename: str) -> str:
        return pattern.format(typename=typename)

    return key_function


def check_graphql_name(value: Any, option: str) -> str:
    """Ensure a generated key can be used as a GraphQL field or type name."""
    if not isinstance(value, str) or not _GRAPHQL_NAME.match(value):
        raise CacheConfigError(f"{option} produced an invalid GraphQL name: {value!r}")
    return value


@dataclass
class CacheLinkConfig:
    """
    Naming and behaviour options for the list cache.

    Usage:
        config = CacheLinkConfig()                      # allTask / removeTask
        config = CacheLinkConfig.from_patterns(read_key="{typename}List")
        config = CacheLinkConfig(cache_read_key=lambda t: f"cached{t}s")
    """
    cache_read_key: KeyFunction = default_cache_read_key
    cache_remove_key: KeyFunction = default_cache_remove_key
    connection_typename: KeyFunction = default_connection_typename
    write_results: bool = True  # write each result into the store before walking it
    serialize_writes: bool = True  # per-type lock around read-merge-write

    def __post_init__(self):
        """Validate key functions by probing them once."""
        for option in ("cache_read_key", "cache_remove_key", "connection_typename"):
            function = getattr(self, option)
            if not callable(function):
                raise CacheConfigError(f"{option} must be callable, got {type(function).__name__}")
            check_graphql_name(function(_PROBE_TYPENAME), option)
        if self.cache_read_key(_PROBE_TYPENAME) == self.cache_remove_key(_PROBE_TYPENAME):
            raise CacheConfigError("cache_read_key and cache_remove_key must produce different keys")

    @classmethod
    def from_patterns(
        cls,
        read_key: str = "all{typename}",
        remove_key: str = "remove{typename}",
        connection_typename: str = "All{typename}Connection",
        **options: Any,
    ) -> "CacheLinkConfig":
        """Create config from format patterns with a {typename} placeholder."""
        return cls(
            cache_read_key=_pattern_function(read_key, "read_key"),
            cache_remove_key=_pattern_function(remove_key, "remove_key"),
            connection_typename=_pattern_function(connection_typename, "connection_typename"),
            **options,
        )

    def read_key(self, typename: str) -> str:
        return check_graphql_name(self.cache_read_key(typename), "cache_read_key")

    def remove_key(self, typename: str) -> str:
        return check_graphql_name(self.cache_remove_key(typename), "cache_remove_key")

    def connection_type(self, typename: str) -> str:
        return check_graphql_name(self.connection_typename(typename), "connection_typename")


@dataclass
class CacheLinkSettings:
    """Settings file contents: naming config, declarations and endpoints."""
    config: CacheLinkConfig = field(default_factory=CacheLinkConfig)
    fragments: list[str] = field(default_factory=list)
    redis_url: Optional[str] = None
    redis_prefix: str = "cachelink"
    endpoint: Optional[str] = None
    timeout: float = 30.0

    @classmethod
    def from_dict(cls, data: dict[str, Any], base_dir: Optional[Path] = None) -> "CacheLinkSettings":
        """
        Create settings from dictionary.

        Example:
            keys:
              read: "all{typename}"
              remove: "remove{typename}"
              connection: "All{typename}Connection"
            fragments:
              - fragments/task.graphql
              - "fragment ProjectFields on Project { id name }"
            redis:
              url: redis://localhost:6379/0
            endpoint: https://api.example.com/graphql
        """
        keys = data.get("keys", {}) or {}
        options = data.get("options", {}) or {}
        config = CacheLinkConfig.from_patterns(
            read_key=keys.get("read", "all{typename}"),
            remove_key=keys.get("remove", "remove{typename}"),
            connection_typename=keys.get("connection", "All{typename}Connection"),
            write_results=options.get("write_results", True),
            serialize_writes=options.get("serialize_writes", True),
        )

        fragments = [
            _read_fragment_source(entry, base_dir)
            for entry in data.get("fragments", []) or []
        ]

        redis_data = data.get("redis", {}) or {}
        return cls(
            config=config,
            fragments=fragments,
            redis_url=redis_data.get("url") or os.getenv(REDIS_URL_ENV),
            redis_prefix=redis_data.get("prefix", "cachelink"),
            endpoint=data.get("endpoint"),
            timeout=float(data.get("timeout", 30.0)),
        )


def _read_fragment_source(entry: str, base_dir: Optional[Path]) -> str:
    """Fragment entries are inline GraphQL or paths to .graphql files."""
    if not isinstance(entry, str):
        raise CacheConfigError(f"Fragment entry must be a string, got {type(entry).__name__}")
    if entry.lstrip().startswith("fragment"):
        return entry
    path = Path(entry)
    if base_dir is not None and not path.is_absolute():
        path = base_dir / path
    if not path.exists():
        raise CacheConfigError(f"Fragment file not found: {path}")
    return path.read_text()


def load_settings(path: Path | str = "cachelink.yaml") -> CacheLinkSettings | None:
    """Load settings from YAML file."""
    path = Path(path)
    if not path.exists():
        return None

    data = yaml.safe_load(path.read_text()) or {}
    if not isinstance(data, dict):
        raise CacheConfigError(f"{path} must contain a mapping at the top level")
    return CacheLinkSettings.from_dict(data, base_dir=path.parent)
