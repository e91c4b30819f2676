"""Two-tier configuration loading with URI fetching and caching."""

import hashlib
import logging
import os
import time
import urllib.parse
from importlib.resources import files
from pathlib import Path
from typing import Any, Dict, List, Optional

import requests
import yaml

logger = logging.getLogger(__name__)


class ConfigLoader:
    """Handles two-tier configuration: local config + rule tables."""

    # Cache directory for remote rule tables
    CACHE_DIR = Path.home() / ".cache" / "record-validation"
    FETCH_TIMEOUT = 10

    DEFAULT_RULE_TABLES_LOCATION = "rule_tables"
    DEFAULT_MAX_AGE_SECONDS = 1800

    def __init__(self, config_path: Optional[str] = None, refresh: bool = False):
        """
        Initialize config loader.

        Args:
            config_path: Path to a local config YAML file. Defaults to the
                local-config.yaml bundled in the record_validation package.
            refresh: Fetch remote rule tables again instead of reading the
                cache. Fetched tables are held back until commit_cache().

        Raises:
            FileNotFoundError: If the config file or a local rule table is missing
            RuntimeError: If a remote rule table cannot be fetched
            ValueError: If a rule table URI has an unsupported scheme
        """
        if config_path is None:
            config_file = files("record_validation").joinpath("local-config.yaml")
            self.local_config_path = str(config_file)
            with config_file.open("r") as f:
                self.local_config = yaml.safe_load(f) or {}
        else:
            self.local_config_path = os.path.abspath(config_path)
            self.local_config = self._load_yaml(self.local_config_path) or {}

        self.cache_dir = self.CACHE_DIR
        self.refresh = refresh
        self._cache_paths: List[Path] = []
        self._pending_cache: Dict[Path, str] = {}
        self.rule_tables = self._load_rule_tables()
        self.rule_tables_loaded_at = time.time()

    def _load_rule_tables(self) -> List[Dict[str, Any]]:
        """Load every rule table listed in the local config, in order."""
        location = self.get_rule_tables_location()
        tables = []
        for name in self.local_config.get("rule_tables") or []:
            uri = self._resolve_table_uri(location, name)
            logger.info(f"Loading rule table from {uri}")
            tables.append(self._load_config_from_uri(uri))
        return tables

    def _resolve_table_uri(self, location: str, name: str) -> str:
        """Join a table name onto the tables location unless it is a URI already."""
        if urllib.parse.urlparse(name).scheme or os.path.isabs(name):
            return name
        separator = "/" if not location.endswith("/") else ""
        return f"{location}{separator}{name}"

    def _load_yaml(self, path: str) -> Any:
        """Load YAML file from disk."""
        with open(path) as f:
            return yaml.safe_load(f)

    def _load_config_from_uri(self, uri: str) -> Any:
        """
        Load a YAML document from a URI (with caching).

        Supports:
        - Relative paths - resolved against the local config directory
        - file:// - Local filesystem (absolute paths)
        - https:// - Remote HTTP/HTTPS
        - http:// - Remote HTTP

        Args:
            uri: Document URI or relative path

        Returns:
            Parsed YAML document
        """
        parsed = urllib.parse.urlparse(uri)

        # Handle relative and absolute filesystem paths (no scheme)
        if not parsed.scheme:
            config_dir = os.path.dirname(os.path.abspath(self.local_config_path))
            path = os.path.join(config_dir, uri)
            return self._load_yaml(path)

        if parsed.scheme == "file":
            path = urllib.parse.unquote(parsed.path)
            return self._load_yaml(path)

        elif parsed.scheme in ("http", "https"):
            # Remote file - cache it
            cache_key = hashlib.sha256(uri.encode()).hexdigest()
            cache_path = self.cache_dir / f"table_{cache_key}.yaml"

            self._cache_paths.append(cache_path)
            if cache_path.exists() and not self.refresh:
                logger.debug(f"Using cached rule table {cache_path} for {uri}")
                return self._load_yaml(str(cache_path))

            content = self._fetch_uri(uri)
            if self.refresh:
                self._pending_cache[cache_path] = content
            else:
                self._write_cache(cache_path, content)
            return yaml.safe_load(content)

        else:
            raise ValueError(f"Unsupported URI scheme: {parsed.scheme} in {uri}")

    def _fetch_uri(self, uri: str) -> str:
        """Fetch content from HTTP/HTTPS URI."""
        try:
            response = requests.get(uri, timeout=self.FETCH_TIMEOUT)
            response.raise_for_status()
            return response.text
        except requests.exceptions.RequestException as e:
            raise RuntimeError(f"Failed to fetch rule table from {uri}: {e}")

    def _write_cache(self, cache_path: Path, content: str) -> None:
        """Replace a cache file atomically so readers never see a partial table."""
        self.cache_dir.mkdir(parents=True, exist_ok=True)
        tmp_path = cache_path.with_name(f"{cache_path.name}.{os.getpid()}.tmp")
        tmp_path.write_text(content)
        os.replace(tmp_path, cache_path)

    def commit_cache(self) -> None:
        """Write remote tables fetched with refresh=True into the cache."""
        for cache_path, content in self._pending_cache.items():
            self._write_cache(cache_path, content)
        self._pending_cache.clear()

    def clear_cache(self) -> None:
        """
        Remove this loader's cached remote rule tables.

        Only the cache files for the URIs this loader read are removed; other
        configs sharing CACHE_DIR keep theirs.
        """
        for cached in self._cache_paths:
            cached.unlink(missing_ok=True)

    def get_local_config(self) -> Dict[str, Any]:
        """Get local configuration (tier 1)."""
        return self.local_config

    def get_rule_tables(self) -> List[Dict[str, Any]]:
        """Get parsed rule tables (tier 2), in configured order."""
        return self.rule_tables

    def get_rule_tables_location(self) -> str:
        return self.local_config.get(
            "rule_tables_location", self.DEFAULT_RULE_TABLES_LOCATION
        )

    def get_strict_conditional_fields(self) -> bool:
        return bool(self.local_config.get("strict_conditional_fields", True))

    def get_rule_tables_max_age(self) -> float:
        """Age in seconds after which rule tables are considered stale."""
        return float(
            self.local_config.get(
                "rule_tables_max_age_seconds", self.DEFAULT_MAX_AGE_SECONDS
            )
        )

    def get_rule_tables_age(self) -> Optional[float]:
        """
        Get age of the rule tables in seconds since they were loaded.

        Returns:
            Age in seconds, or None if not loaded
        """
        if hasattr(self, "rule_tables_loaded_at"):
            return time.time() - self.rule_tables_loaded_at
        return None
