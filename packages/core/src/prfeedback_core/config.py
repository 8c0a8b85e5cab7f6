import os
from pathlib import Path

import yaml

DEFAULT_CONFIG: dict = {
    "gh_path": "gh",
    "github_api_url": "https://api.github.com",
    "per_page": 100,  # REST page size for list endpoints (GitHub caps this at 100)
    "rule_width": 100,
    "gh_timeout": None,  # seconds; None = wait for gh as long as it takes
}


def load_config(config_path: str = ".pr-feedback.yml") -> dict:
    """
    Load configuration by merging (in order of precedence):
      1. Built-in defaults
      2. .pr-feedback.yml in the current directory
    """
    config = dict(DEFAULT_CONFIG)

    path = Path(config_path)
    if path.exists():
        with open(path) as f:
            file_config = yaml.safe_load(f) or {}
        if not isinstance(file_config, dict):
            raise ValueError(f"{config_path} must contain a mapping, got {type(file_config).__name__}")
        config.update(file_config)

    config["github_token"] = os.environ.get("GITHUB_TOKEN")

    return config
