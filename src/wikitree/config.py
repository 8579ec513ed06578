"""Configuration management for Wikitree.

Supports TOML configuration format with auto-discovery.
"""

import tomllib
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Self

from wikitree.core.layout import CONFIG_FILENAME, DEFAULT_SUFFIX


@dataclass
class ContentConfig:
    """Content root configuration."""

    root: Path = field(default_factory=lambda: Path("content"))
    document_suffix: str = DEFAULT_SUFFIX
    read_forbidden: list[str] = field(default_factory=list)
    write_forbidden: list[str] = field(default_factory=list)


@dataclass
class WatchConfig:
    """File watcher configuration."""

    patterns: list[str] | None = None
    debounce: int = 1600


@dataclass
class Config:
    """Application configuration."""

    content: ContentConfig
    watch: WatchConfig
    config_path: Path | None = None

    @classmethod
    def load(cls, config_path: Path | None = None) -> Self:
        """Load configuration from file.

        If config_path is provided, loads from that file.
        Otherwise, searches for wikitree.toml in current directory and parents.

        Args:
            config_path: Optional explicit path to config file

        Returns:
            Config instance with defaults for missing sections

        Raises:
            FileNotFoundError: If explicit config_path doesn't exist
            ValueError: If configuration is invalid
        """
        if config_path is not None:
            if not config_path.exists():
                raise FileNotFoundError(f"Configuration file not found: {config_path}")
            return cls._load_from_file(config_path)

        discovered_path = cls._discover_config()
        if discovered_path is None:
            return cls._default()

        return cls._load_from_file(discovered_path)

    @classmethod
    def _discover_config(cls) -> Path | None:
        """Search for config file in current directory and parents.

        Returns:
            Path to config file or None if not found
        """
        current = Path.cwd()
        while True:
            candidate = current / CONFIG_FILENAME
            if candidate.exists():
                return candidate
            parent = current.parent
            if parent == current:
                return None
            current = parent

    @classmethod
    def _default(cls) -> Self:
        return cls(content=ContentConfig(), watch=WatchConfig())

    @classmethod
    def _load_from_file(cls, path: Path) -> Self:
        """Load configuration from a specific file.

        Args:
            path: Path to TOML configuration file

        Returns:
            Config instance

        Raises:
            ValueError: If configuration is invalid
        """
        with path.open("rb") as f:
            try:
                data = tomllib.load(f)
            except tomllib.TOMLDecodeError as e:
                raise ValueError(f"Invalid configuration file {path}: {e}") from e

        config_dir = path.parent

        return cls(
            content=cls._parse_content(data.get("content"), config_dir),
            watch=cls._parse_watch(data.get("watch")),
            config_path=path,
        )

    @classmethod
    def _parse_content(cls, data: object, config_dir: Path) -> ContentConfig:
        """Parse content configuration section.

        Args:
            data: Raw content section data
            config_dir: Directory containing config file (for relative paths)

        Returns:
            ContentConfig instance
        """
        if data is None:
            return ContentConfig(root=config_dir / "content")

        if not isinstance(data, dict):
            raise ValueError("content section must be a dictionary")

        root = data.get("root", "content")
        if not isinstance(root, str):
            raise ValueError("content.root must be a string")

        document_suffix = data.get("document_suffix", DEFAULT_SUFFIX)
        if not isinstance(document_suffix, str) or not document_suffix.startswith("."):
            raise ValueError("content.document_suffix must be a string starting with '.'")

        return ContentConfig(
            root=config_dir / root,
            document_suffix=document_suffix,
            read_forbidden=cls._parse_string_list(data, "read_forbidden", "content"),
            write_forbidden=cls._parse_string_list(data, "write_forbidden", "content"),
        )

    @classmethod
    def _parse_watch(cls, data: object) -> WatchConfig:
        """Parse watch configuration section."""
        if data is None:
            return WatchConfig()

        if not isinstance(data, dict):
            raise ValueError("watch section must be a dictionary")

        patterns: list[str] | None = None
        if data.get("patterns") is not None:
            patterns = cls._parse_string_list(data, "patterns", "watch")

        debounce = data.get("debounce", 1600)
        if not isinstance(debounce, int) or isinstance(debounce, bool):
            raise ValueError("watch.debounce must be an integer")

        return WatchConfig(patterns=patterns, debounce=debounce)

    @classmethod
    def _parse_string_list(cls, data: dict[str, object], key: str, section: str) -> list[str]:
        raw = data.get(key, [])
        if not isinstance(raw, list):
            raise ValueError(f"{section}.{key} must be a list")
        items: list[str] = []
        for item in raw:
            if not isinstance(item, str):
                raise ValueError(f"{section}.{key} items must be strings")
            items.append(item)
        return items

    def with_overrides(
        self,
        *,
        root: Path | None = None,
        document_suffix: str | None = None,
    ) -> Self:
        """Create a new Config with CLI overrides applied.

        Only non-None values override the existing config. The original
        Config is not modified.

        Args:
            root: Override content.root
            document_suffix: Override content.document_suffix

        Returns:
            New Config instance with overrides applied
        """
        content = self.content
        if root is not None or document_suffix is not None:
            content = replace(
                self.content,
                root=root if root is not None else self.content.root,
                document_suffix=(
                    document_suffix
                    if document_suffix is not None
                    else self.content.document_suffix
                ),
            )
        return replace(self, content=content)
