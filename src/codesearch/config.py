"""Configuration — provider profiles, defaults, and environment overrides."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from pathlib import Path

from codesearch.exceptions import ConfigurationError

# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------

DEFAULT_PROVIDER: str = "litellm"
DEFAULT_MODEL: str = "codesearch-embedding"
DEFAULT_EXTENSIONS: tuple[str, ...] = (
    "go", "js", "ts", "py", "java", "cpp", "c", "h", "hpp", "yaml", "yml",
)

DEFAULT_TIMEOUT: float = 60.0
"""Seconds before a single embedding request is abandoned."""

DEFAULT_FIND_LIMIT: int = 10
DEFAULT_MIN_SIMILARITY: float = 0.03

_DEFAULT_DATA_DIR = Path.home() / ".codesearch"
_ALIAS_RE = re.compile(r"^[A-Za-z0-9_.-]+$")


# ---------------------------------------------------------------------------
# Provider profiles
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ProviderProfile:
    """Connection settings for one embedding provider.

    Attributes:
        base_url: Root URL of the provider's HTTP API.
        api_key: Bearer token, or empty when the provider needs none.
        timeout: Per-request timeout in seconds.
    """

    base_url: str
    api_key: str = ""
    timeout: float = DEFAULT_TIMEOUT


def litellm_profile() -> ProviderProfile:
    """Return the LiteLLM proxy profile, honouring environment overrides."""
    return ProviderProfile(
        base_url=os.environ.get("CODESEARCH_LITELLM_URL", "http://localhost:4000"),
        api_key=os.environ.get("CODESEARCH_LITELLM_API_KEY", "sk-1234"),
        timeout=request_timeout(),
    )


def ollama_profile() -> ProviderProfile:
    """Return the Ollama profile, honouring environment overrides."""
    return ProviderProfile(
        base_url=os.environ.get("CODESEARCH_OLLAMA_URL", "http://localhost:11434"),
        timeout=request_timeout(),
    )


def request_timeout() -> float:
    raw = os.environ.get("CODESEARCH_TIMEOUT")
    if not raw:
        return DEFAULT_TIMEOUT
    try:
        value = float(raw)
    except ValueError:
        raise ConfigurationError(f"CODESEARCH_TIMEOUT must be a number, got {raw!r}") from None
    if value <= 0:
        raise ConfigurationError("CODESEARCH_TIMEOUT must be positive")
    return value


# ---------------------------------------------------------------------------
# Paths and argument helpers
# ---------------------------------------------------------------------------


def resolve_data_dir(data_dir: str | Path | None = None) -> Path:
    """Return the directory holding per-project databases.

    Explicit *data_dir* wins, then ``CODESEARCH_DATA_DIR``, then
    ``~/.codesearch``.
    """
    if data_dir is not None:
        return Path(data_dir).expanduser()
    env = os.environ.get("CODESEARCH_DATA_DIR")
    if env:
        return Path(env).expanduser()
    return _DEFAULT_DATA_DIR


def validate_alias(alias: str) -> str:
    """Return *alias* stripped, or raise ``ConfigurationError`` if unusable as a file name."""
    alias = alias.strip()
    if not alias or not _ALIAS_RE.match(alias) or alias in (".", ".."):
        raise ConfigurationError(
            f"invalid project alias {alias!r}: use letters, digits, '_', '-' or '.'"
        )
    return alias


def database_path(alias: str, data_dir: str | Path | None = None) -> Path:
    """Return the SQLite database path for project *alias*."""
    return resolve_data_dir(data_dir) / f"{validate_alias(alias)}.db"


def parse_extensions(raw: str | list[str] | tuple[str, ...]) -> list[str]:
    """Normalize an extension list: strip whitespace and dots, lowercase, drop blanks.

    Accepts a comma-separated string (``"go, .PY"``) or a sequence.
    """
    items = raw.split(",") if isinstance(raw, str) else list(raw)
    result: list[str] = []
    for item in items:
        ext = item.strip().lstrip(".").lower()
        if ext and ext not in result:
            result.append(ext)
    return result
