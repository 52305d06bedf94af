"""Profile configuration management.

Handles reading/writing config.yaml and selecting the active profile and
organization.
"""

import os
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Dict, Optional

import yaml


# Default config location (override with GCLI_CONFIG_PATH)
CONFIG_ENV_VAR = "GCLI_CONFIG_PATH"
DEFAULT_CONFIG_PATH = Path.home() / ".gcli" / "config.yaml"


def get_config_path() -> Path:
    """Get the config file path, honoring GCLI_CONFIG_PATH."""
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        return Path(override)
    return DEFAULT_CONFIG_PATH


@dataclass
class Profile:
    """Connection details for one Grafana instance."""
    name: str
    url: str
    user: str
    password: str

    @classmethod
    def from_dict(cls, data: dict) -> "Profile":
        return cls(
            name=data.get("name", ""),
            url=data.get("url", ""),
            user=data.get("user", ""),
            password=data.get("pass", ""),
        )

    def to_dict(self) -> dict:
        data = asdict(self)
        data["pass"] = data.pop("password")
        return data


class ProfileStore:
    """
    File-backed store for profiles and the active profile/organization.

    Every operation reads the file fresh; writes replace it entirely.

    Usage:
        store = ProfileStore()
        store.save_profile(Profile("local", "http://localhost:3000", "admin", "admin"))
        store.set_active("local")
        profile = store.require_active()
    """

    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path) if path else get_config_path()

    def load(self) -> dict:
        """Load raw configuration; a missing file is an empty config."""
        if not self.path.exists():
            return {"active": "", "active_org": "", "profiles": {}}

        with open(self.path, "r", encoding="utf-8") as f:
            try:
                config = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ValueError(f"failed to parse config {self.path}: {e}") from e

        # Ensure keys exist
        if not config.get("profiles"):
            config["profiles"] = {}
        config.setdefault("active", "")
        config.setdefault("active_org", "")
        return config

    def save(self, config: dict) -> None:
        """Save configuration to disk (owner read/write only)."""
        self.path.parent.mkdir(parents=True, exist_ok=True)

        with open(self.path, "w", encoding="utf-8") as f:
            yaml.dump(config, f, default_flow_style=False, sort_keys=False, allow_unicode=True)
        os.chmod(self.path, 0o600)

    def save_profile(self, profile: Profile) -> None:
        """Add or update a profile."""
        config = self.load()
        config["profiles"][profile.name] = profile.to_dict()
        self.save(config)

    def load_all(self) -> Dict[str, Profile]:
        config = self.load()
        return {name: Profile.from_dict(data) for name, data in config["profiles"].items()}

    def set_active(self, name: str) -> None:
        config = self.load()
        if name not in config["profiles"]:
            raise ValueError(f"profile {name} does not exist")
        config["active"] = name
        self.save(config)

    def get_active(self) -> Optional[Profile]:
        """Return the active profile, or None if none is selected."""
        config = self.load()
        name = config.get("active")
        if not name:
            return None
        if name not in config["profiles"]:
            raise ValueError(f"active profile {name} not found")
        return Profile.from_dict(config["profiles"][name])

    def require_active(self) -> Profile:
        profile = self.get_active()
        if profile is None:
            raise ValueError("no active profile set; use 'gcli config use <name>' first")
        return profile

    def set_active_org(self, org_id: str) -> None:
        """Store the selected organization ID."""
        config = self.load()
        config["active_org"] = str(org_id)
        self.save(config)

    def get_active_org(self) -> str:
        """Return the selected organization ID ('' when none)."""
        return str(self.load().get("active_org") or "")
