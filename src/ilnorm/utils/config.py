import json
import os
import sys
import tempfile
from pathlib import Path
from typing import Any, Dict

DEFAULT_CONFIG: Dict[str, Any] = {
    "strip_version_info": False,
    "tool_path": None,
    "timeout": None,
    "log_file": os.path.join(tempfile.gettempdir(), "ilnorm_engine.log"),
}


class ConfigManager:
    """
    User settings stored as JSON in ~/.ilnorm/config.json, layered over DEFAULT_CONFIG.
    """
    def __init__(self):
        self.config_dir = Path.home() / ".ilnorm"
        self.config_file = self.config_dir / "config.json"
        self.config = self.load_config()

    def load_config(self) -> Dict[str, Any]:
        self.config_dir.mkdir(parents=True, exist_ok=True)
        config = DEFAULT_CONFIG.copy()
        if not self.config_file.exists():
            return config
        try:
            with open(self.config_file, "r") as f:
                user_config = json.load(f)
            if isinstance(user_config, dict):
                config.update(user_config)
        except (OSError, json.JSONDecodeError) as e:
            print(f"Warning: Ignoring unreadable config {self.config_file}: {e}", file=sys.stderr)
        return config

    def save_config(self):
        self.config_dir.mkdir(parents=True, exist_ok=True)
        with open(self.config_file, "w") as f:
            json.dump(self.config, f, indent=2)

    def get(self, key: str, default: Any = None) -> Any:
        return self.config.get(key, default)

    def set(self, key: str, value: Any):
        self.config[key] = value
        self.save_config()
