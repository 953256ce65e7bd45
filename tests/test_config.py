"""Tests for a11y_audit/config.py"""

import textwrap
from pathlib import Path

import pytest

from a11y_audit.config import (
    Config,
    ConfigError,
    SiteNotFoundError,
    generate_template,
    load,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    monkeypatch.delenv("A11Y_CRAWLER_URL", raising=False)
    monkeypatch.delenv("A11Y_CRAWLER_TOKEN", raising=False)


def write_config(tmp_path: Path, content: str) -> Path:
    p = tmp_path / "a11y-config.yaml"
    p.write_text(textwrap.dedent(content), encoding="utf-8")
    return p


VALID_YAML = """\
    crawler:
      url: "https://crawler.example.com"
      token: "sk_abc123"
    defaults:
      limit: 50
      format: csv
    sites:
      docs: "https://docs.example.com"
    """


# ---------------------------------------------------------------------------
# load() - happy path
# ---------------------------------------------------------------------------

def test_load_valid_config(tmp_path):
    config = load(str(write_config(tmp_path, VALID_YAML)))
    assert config.url == "https://crawler.example.com"
    assert config.token == "sk_abc123"
    assert config.limit == 50
    assert config.format == "csv"
    assert config.sites == {"docs": "https://docs.example.com"}


def test_load_applies_defaults(tmp_path):
    p = write_config(tmp_path, """\
        crawler:
          url: "https://crawler.example.com"
          token: "sk_abc123"
        """)
    config = load(str(p))
    assert config.limit == 25
    assert config.format == "json"
    assert config.sites == {}


# ---------------------------------------------------------------------------
# load() - invalid files
# ---------------------------------------------------------------------------

def test_load_missing_file(tmp_path):
    with pytest.raises(ConfigError, match="not found"):
        load(str(tmp_path / "no-such-file.yaml"))


def test_load_unparsable_yaml(tmp_path):
    p = write_config(tmp_path, "crawler: [unclosed\n")
    with pytest.raises(ConfigError, match="Failed to parse"):
        load(str(p))


def test_load_non_mapping(tmp_path):
    p = write_config(tmp_path, "- just\n- a list\n")
    with pytest.raises(ConfigError, match="mapping"):
        load(str(p))


def test_load_reports_scalar_sections(tmp_path):
    p = write_config(tmp_path, """\
        crawler: "https://crawler.example.com"
        defaults: 5
        sites:
          docs: "https://docs.example.com"
        """)
    with pytest.raises(ConfigError) as excinfo:
        load(str(p))
    message = str(excinfo.value)
    assert message.startswith("Invalid configuration:")
    assert "'crawler' must be a mapping (got str)" in message
    assert "'defaults' must be a mapping (got int)" in message
    assert "'sites'" not in message


def test_load_rejects_list_sites(tmp_path):
    p = write_config(tmp_path, VALID_YAML.replace(
        'docs: "https://docs.example.com"', '- "https://docs.example.com"'))
    with pytest.raises(ConfigError, match="'sites' must be a mapping"):
        load(str(p))


def test_load_missing_url(tmp_path):
    p = write_config(tmp_path, """\
        crawler:
          token: "sk_abc123"
        """)
    with pytest.raises(ConfigError, match="crawler.url"):
        load(str(p))


def test_load_missing_token(tmp_path):
    p = write_config(tmp_path, """\
        crawler:
          url: "https://crawler.example.com"
        """)
    with pytest.raises(ConfigError, match="crawler.token"):
        load(str(p))


def test_load_reports_all_invalid_defaults(tmp_path):
    p = write_config(tmp_path, """\
        crawler:
          url: "https://crawler.example.com"
          token: "sk_abc123"
        defaults:
          limit: 0
          format: xml
        """)
    with pytest.raises(ConfigError) as excinfo:
        load(str(p))
    assert "defaults.limit" in str(excinfo.value)
    assert "defaults.format" in str(excinfo.value)


# ---------------------------------------------------------------------------
# load() - environment variable overrides
# ---------------------------------------------------------------------------

def test_env_url_overrides_config(tmp_path, monkeypatch):
    p = write_config(tmp_path, VALID_YAML)
    monkeypatch.setenv("A11Y_CRAWLER_URL", "https://override.example.com")
    assert load(str(p)).url == "https://override.example.com"


def test_env_token_overrides_config(tmp_path, monkeypatch):
    p = write_config(tmp_path, VALID_YAML)
    monkeypatch.setenv("A11Y_CRAWLER_TOKEN", "sk_override")
    assert load(str(p)).token == "sk_override"


def test_env_vars_can_supply_missing_fields(tmp_path, monkeypatch):
    """Config with no crawler section is valid when env vars are set."""
    p = write_config(tmp_path, """\
        sites:
          docs: "https://docs.example.com"
        """)
    monkeypatch.setenv("A11Y_CRAWLER_URL", "https://crawler.example.com")
    monkeypatch.setenv("A11Y_CRAWLER_TOKEN", "sk_from_env")
    config = load(str(p))
    assert config.url == "https://crawler.example.com"
    assert config.token == "sk_from_env"


# ---------------------------------------------------------------------------
# resolve_site()
# ---------------------------------------------------------------------------

def test_resolve_known_alias():
    config = Config(url="u", token="t", sites={"docs": "https://docs.example.com"})
    assert config.resolve_site("docs") == "https://docs.example.com"


def test_resolve_raw_url_fallback():
    config = Config(url="u", token="t", sites={"docs": "https://docs.example.com"})
    assert config.resolve_site("https://other.example.com") == "https://other.example.com"


def test_resolve_unknown_raises():
    config = Config(url="u", token="t", sites={"docs": "https://docs.example.com"})
    with pytest.raises(SiteNotFoundError, match="unknown-site"):
        config.resolve_site("unknown-site")


# ---------------------------------------------------------------------------
# generate_template()
# ---------------------------------------------------------------------------

def test_generate_template_creates_loadable_file(tmp_path):
    out = tmp_path / "a11y-config.yaml"
    generate_template(str(out))
    content = out.read_text()
    assert "crawler:" in content
    assert "sites:" in content

    config = load(str(out))
    assert config.resolve_site("docs") == "https://docs.example.com"


def test_generate_template_refuses_to_overwrite(tmp_path):
    out = tmp_path / "a11y-config.yaml"
    out.write_text("existing content")
    with pytest.raises(ConfigError, match="already exists"):
        generate_template(str(out))
