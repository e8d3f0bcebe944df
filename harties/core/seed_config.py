"""
Seed configuration loader
Reads YAML files describing businesses, test users and article publishers
"""

from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import ValidationError

from harties.core.config import settings
from harties.core.exceptions import ConfigurationError
from harties.core.logging import log
from harties.schemas.seed import BusinessSeed, PublisherProfile, UserSeed

DEFAULT_PUBLISHER = "news24"


class SeedConfigLoader:
    """Loads and validates seed configuration from YAML files"""

    def __init__(self, config_dir: Optional[Path] = None):
        """
        Initialize config loader

        Args:
            config_dir: Directory containing businesses.yaml, users.yaml and publishers.yaml.
                        Defaults to settings.seed_config_dir
        """
        self.config_dir = Path(config_dir or settings.seed_config_dir)
        self._cache: Dict[str, Any] = {}

        if not self.config_dir.exists():
            log.warning(f"Seed config directory not found: {self.config_dir}")

    def _load(self, filename: str) -> Dict[str, Any]:
        if filename in self._cache:
            return self._cache[filename]

        config_file = self.config_dir / filename
        if not config_file.exists():
            log.warning(f"Seed config not found: {config_file}")
            data: Dict[str, Any] = {}
        else:
            try:
                with open(config_file, "r", encoding="utf-8") as f:
                    data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigurationError(f"Invalid YAML in {config_file}: {e}") from e
            log.debug(f"Loaded seed config from {config_file}")

        self._cache[filename] = data
        return data

    def load_businesses(self) -> Dict[str, BusinessSeed]:
        """Business seeds keyed by their short key"""
        entries = self._load("businesses.yaml").get("businesses", {})
        seeds = {}
        for key, entry in entries.items():
            try:
                seeds[key] = BusinessSeed(key=key, **entry)
            except ValidationError as e:
                raise ConfigurationError(f"Invalid business seed '{key}': {e}") from e
        return seeds

    def get_business(self, key: str) -> BusinessSeed:
        businesses = self.load_businesses()
        if key not in businesses:
            available = ", ".join(sorted(businesses)) or "none"
            raise ConfigurationError(f"Unknown business '{key}' (available: {available})")
        return businesses[key]

    def load_users(self) -> List[UserSeed]:
        entries = self._load("users.yaml").get("users", [])
        try:
            return [UserSeed(**entry) for entry in entries]
        except ValidationError as e:
            raise ConfigurationError(f"Invalid user seed: {e}") from e

    def load_publishers(self) -> Dict[str, PublisherProfile]:
        entries = self._load("publishers.yaml").get("publishers", {})
        publishers = {}
        for name, entry in entries.items():
            try:
                publishers[name] = PublisherProfile(name=name, **entry)
            except ValidationError as e:
                raise ConfigurationError(f"Invalid publisher '{name}': {e}") from e

        if DEFAULT_PUBLISHER not in publishers:
            publishers[DEFAULT_PUBLISHER] = self._get_default_publisher()
        return publishers

    def get_publisher(self, name: str = DEFAULT_PUBLISHER) -> PublisherProfile:
        publishers = self.load_publishers()
        if name not in publishers:
            available = ", ".join(sorted(publishers))
            raise ConfigurationError(f"Unknown publisher '{name}' (available: {available})")
        return publishers[name]

    def _get_default_publisher(self) -> PublisherProfile:
        """Minimal publisher profile if config not found"""
        return PublisherProfile(
            name=DEFAULT_PUBLISHER,
            site_name="News24",
            boilerplate_phrases=["Sign up", "Subscribe", "Follow us", "News24"],
            placeholder_seed="news24",
        )


# Global instance
seed_config = SeedConfigLoader()
