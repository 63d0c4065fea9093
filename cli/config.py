"""
CLI Configuration Management
"""

import os
import json
from pathlib import Path
from dataclasses import dataclass, field, asdict
from typing import Optional, Dict, Any


@dataclass
class CLIConfig:
    """Configuration for the Student Records CLI"""

    # API settings
    api_base_url: str = "http://localhost:5000/api"
    timeout: float = 30.0

    # Output settings
    verbose: bool = False

    # Paths
    config_dir: str = field(default_factory=lambda: str(Path.home() / ".studentrecords"))
    cookie_file: str = "cookies.json"

    def __post_init__(self):
        """Initialize paths and directories"""
        Path(self.config_dir).mkdir(parents=True, exist_ok=True)

        if not os.path.isabs(self.cookie_file):
            self.cookie_file = str(Path(self.config_dir) / self.cookie_file)

    @property
    def config_path(self) -> Path:
        return Path(self.config_dir) / "config.json"

    def load_from_file(self, config_path: str) -> None:
        """Load configuration from JSON file"""
        path = Path(config_path)
        if path.exists():
            with open(path) as f:
                data = json.load(f)
                for key, value in data.items():
                    if hasattr(self, key):
                        setattr(self, key, value)

    def save_to_file(self, config_path: Optional[str] = None) -> None:
        """Save configuration to JSON file"""
        path = Path(config_path or self.config_path)
        with open(path, 'w') as f:
            json.dump(asdict(self), f, indent=2)

    @classmethod
    def load_default(cls, config_dir: Optional[str] = None) -> "CLIConfig":
        """Load default configuration from user config directory"""
        config = cls(config_dir=config_dir) if config_dir else cls()
        if config.config_path.exists():
            config.load_from_file(str(config.config_path))

        # Override with environment variables
        config._load_from_env()

        return config

    def _load_from_env(self) -> None:
        """Load configuration from environment variables"""
        env_mappings = {
            "STUDENTRECORDS_API_URL": "api_base_url",
            "STUDENTRECORDS_TIMEOUT": ("timeout", float),
            "STUDENTRECORDS_VERBOSE": ("verbose", lambda x: x.lower() == "true"),
        }

        for env_var, mapping in env_mappings.items():
            value = os.environ.get(env_var)
            if value:
                if isinstance(mapping, tuple):
                    attr, converter = mapping
                    setattr(self, attr, converter(value))
                else:
                    setattr(self, mapping, value)

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary"""
        return asdict(self)
