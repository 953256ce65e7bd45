"""Configuration loading and validation.

Usage:
    config = load("a11y-config.yaml")          # raises ConfigError on bad config
    url = config.resolve_site("docs")          # returns "https://docs.example.com"
    generate_template("a11y-config.yaml")      # writes example file to disk
"""

import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from a11y_audit.client import DEFAULT_LIMIT
from a11y_audit.reports.export import FORMATS

DEFAULT_CONFIG_PATH = "a11y-config.yaml"


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------

class ConfigError(Exception):
    """Raised when the configuration is missing or invalid."""


class SiteNotFoundError(ConfigError):
    """Raised when a site alias is not found in the config."""


# ---------------------------------------------------------------------------
# Config dataclass
# ---------------------------------------------------------------------------

@dataclass
class Config:
    url: str
    token: str
    limit: int = DEFAULT_LIMIT
    format: str = "json"
    sites: dict[str, str] = field(default_factory=dict)

    def resolve_site(self, name: str) -> str:
        """Return the start URL for a given alias.

        Accepts either a configured alias (e.g. "docs") or a full
        ``http(s)://`` URL passed directly.
        """
        if name in self.sites:
            return self.sites[name]
        if name.startswith(("http://", "https://")):
            return name
        available = ", ".join(self.sites.keys()) or "(none configured)"
        raise SiteNotFoundError(
            f"Site '{name}' not found. Available aliases: {available}"
        )


# ---------------------------------------------------------------------------
# Loader
# ---------------------------------------------------------------------------

def load(config_path: str = DEFAULT_CONFIG_PATH) -> Config:
    """Load and validate configuration from a YAML file.

    Environment variables A11Y_CRAWLER_URL and A11Y_CRAWLER_TOKEN override
    file values.

    Raises:
        ConfigError: if the file is missing, malformed, or required fields
                     are absent or invalid.
    """
    path = Path(config_path)

    if not path.exists():
        raise ConfigError(
            f"Config file not found: '{config_path}'\n"
            "Run `python -m a11y_audit init` to generate a template."
        )

    try:
        with path.open(encoding="utf-8") as f:
            raw = yaml.safe_load(f)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse '{config_path}': {exc}") from exc

    if not isinstance(raw, dict):
        raise ConfigError(f"'{config_path}' must be a YAML mapping at the top level.")

    _validate_sections(raw)

    crawler  = raw.get("crawler") or {}
    defaults = raw.get("defaults") or {}
    url   = os.environ.get("A11Y_CRAWLER_URL")   or crawler.get("url",   "")
    token = os.environ.get("A11Y_CRAWLER_TOKEN") or crawler.get("token", "")
    sites: dict[str, str] = raw.get("sites") or {}

    config = Config(
        url=str(url).strip(),
        token=str(token).strip(),
        limit=defaults.get("limit", DEFAULT_LIMIT),
        format=str(defaults.get("format", "json")),
        sites=sites,
    )
    _validate(config)
    return config


def _validate_sections(raw: dict) -> None:
    """Raise ConfigError when a section is present but is not a mapping."""
    errors = [
        f"  - '{name}' must be a mapping (got {type(raw[name]).__name__})"
        for name in ("crawler", "defaults", "sites")
        if raw.get(name) is not None and not isinstance(raw[name], dict)
    ]
    if errors:
        raise ConfigError("Invalid configuration:\n" + "\n".join(errors))


def _validate(config: Config) -> None:
    """Raise ConfigError listing every invalid field."""
    errors: list[str] = []

    if not config.url:
        errors.append(
            "  - 'crawler.url' is missing (or set the A11Y_CRAWLER_URL environment variable)"
        )
    if not config.token:
        errors.append(
            "  - 'crawler.token' is missing (or set the A11Y_CRAWLER_TOKEN environment variable)"
        )
    if isinstance(config.limit, bool) or not isinstance(config.limit, int) or config.limit < 1:
        errors.append(
            f"  - 'defaults.limit' must be a positive integer (got {config.limit!r})"
        )
    if config.format not in FORMATS:
        errors.append(
            f"  - 'defaults.format' must be one of {', '.join(FORMATS)} (got '{config.format}')"
        )

    if errors:
        raise ConfigError("Invalid configuration:\n" + "\n".join(errors))


# ---------------------------------------------------------------------------
# Template generator (used by `init` command)
# ---------------------------------------------------------------------------

TEMPLATE = """\
crawler:
  url: "https://api.spider.cloud"
  token: "sk-xxxxxxxxxxxx"        # API key of the crawling service

defaults:
  limit: 25                       # Max pages per crawl
  format: json                    # json | csv | markdown

sites:
  # Human-readable alias: start URL
  docs: "https://docs.example.com"
  shop: "https://shop.example.com"
"""


def generate_template(output_path: str = DEFAULT_CONFIG_PATH) -> None:
    """Write a template a11y-config.yaml to *output_path*.

    Raises:
        ConfigError: if the file already exists (to avoid overwriting secrets).
    """
    path = Path(output_path)
    if path.exists():
        raise ConfigError(
            f"'{output_path}' already exists. Remove it first or choose a different path."
        )
    path.write_text(TEMPLATE, encoding="utf-8")
