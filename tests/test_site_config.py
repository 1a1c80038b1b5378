"""Tests for loading the site configuration YAML."""

from __future__ import annotations

import typing as typ
from pathlib import Path
from textwrap import dedent

import pytest

from tas_pages.config import SiteConfig, SiteConfigError, load_site_config
from tas_pages.config.loader import build_site_config


def _write(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "site.yaml"
    path.write_text(dedent(text).lstrip(), encoding="utf-8")
    return path


def test_load_site_config_reads_every_section(tmp_path: Path) -> None:
    """Each YAML block maps onto its typed field."""
    path = _write(
        tmp_path,
        """
        api:
          base_url: https://example.invalid/api/
          timeout: 2.5
          retries: 0
        ordering:
          wait_timeout: 1
          pinned_sections:
            Index: [landing, hero]
            about-us: team
        overrides:
          button_classes: [button, primary]
        dynamic_sections:
          enabled: false
        """,
    )

    config = load_site_config(path)

    assert config.api.base_url == "https://example.invalid/api", (
        f"expected the trailing slash to be trimmed, got {config.api.base_url!r}"
    )
    assert config.api.timeout == 2.5, f"unexpected timeout {config.api.timeout!r}"
    assert config.api.retries == 0, f"unexpected retries {config.api.retries!r}"
    assert config.wait_timeout == 1.0, f"unexpected wait {config.wait_timeout!r}"
    assert config.pinned_for("index") == frozenset({"landing", "hero"}), (
        "expected pinned slugs to be matched case-insensitively"
    )
    assert config.pinned_for("About-Us") == frozenset({"team"}), (
        "expected a single id to be accepted"
    )
    assert config.button_classes == ("button", "primary"), (
        f"unexpected classes {config.button_classes!r}"
    )
    assert config.dynamic_sections is False, "expected the loader to be disabled"


def test_empty_file_uses_defaults(tmp_path: Path) -> None:
    """An empty document yields the built-in defaults."""
    config = load_site_config(_write(tmp_path, ""))

    assert config == SiteConfig(), f"expected defaults, got {config!r}"
    assert config.pinned_for("index") == frozenset({"landing"}), (
        "expected the landing section to be pinned on the home page by default"
    )
    assert config.pinned_for("tutors") == frozenset(), "expected nothing pinned"


def test_missing_file_raises(tmp_path: Path) -> None:
    """A missing path is reported rather than silently defaulted."""
    with pytest.raises(FileNotFoundError, match="not found"):
        load_site_config(tmp_path / "absent.yaml")


def test_top_level_must_be_mapping(tmp_path: Path) -> None:
    """A YAML list at the top level is rejected."""
    with pytest.raises(SiteConfigError, match="mapping"):
        load_site_config(_write(tmp_path, "- api\n"))


@pytest.mark.parametrize(
    ("raw", "fragment"),
    [
        ({"api": "https://example.invalid"}, "'api' configuration"),
        ({"api": {"timeout": 0}}, "api.timeout"),
        ({"api": {"retries": True}}, "api.retries"),
        ({"api": {"retries": -1}}, "api.retries"),
        ({"ordering": {"wait_timeout": "soon"}}, "ordering.wait_timeout"),
        ({"ordering": {"pinned_sections": {"index": 3}}}, "Pinned sections"),
    ],
)
def test_invalid_values_raise(raw: dict[str, typ.Any], fragment: str) -> None:
    """Malformed values name the offending key."""
    with pytest.raises(SiteConfigError, match=fragment):
        build_site_config(raw)


def test_bundled_config_loads() -> None:
    """The sample configuration shipped with the project stays valid."""
    path = Path(__file__).resolve().parents[1] / "config" / "site.yaml"
    config = load_site_config(path)

    assert config.api.base_url.endswith("/api"), f"unexpected {config.api.base_url!r}"
    assert config.button_classes == ("button", "aurora"), (
        f"unexpected classes {config.button_classes!r}"
    )
