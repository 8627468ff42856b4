import os
import re
from pathlib import Path
from typing import Any, Optional

import toml

DEFAULT_PROVIDER = "openai"
DEFAULT_MODELS = {
    "openai": "gpt-4.1-mini",
    "anthropic": "claude-3-5-sonnet-latest",
    "gemini": "gemini-2.0-flash",
}

CONFIG_ENV_VAR = "LINKRAG_CONFIG"
CONFIG_FILENAME = "config.toml"

# ${NAME} or ${NAME:-fallback}
ENV_REF_RE = re.compile(r"\$\{(?P<name>[^}:]+)(?::-(?P<fallback>[^}]*))?\}")


def find_config_path(explicit_path: Path | None = None) -> Path:
    """Locate config.toml.

    Order: the explicit path, ``$LINKRAG_CONFIG``, the working directory,
    then the repository root.
    """
    if explicit_path:
        return explicit_path
    from_env = os.environ.get(CONFIG_ENV_VAR)
    if from_env:
        return Path(from_env)
    for directory in (Path.cwd(), Path(__file__).resolve().parents[2]):
        candidate = directory / CONFIG_FILENAME
        if candidate.exists():
            return candidate
    raise FileNotFoundError(f"{CONFIG_FILENAME} not found")


def load_config(config_path: Path = Path(CONFIG_FILENAME)) -> dict[str, Any]:
    """Load a TOML config file and expand ``${VAR}`` / ``${VAR:-default}``
    references in every string value, however deeply nested.
    """
    return _expand_env(toml.load(config_path))


def _expand_env(value: Any) -> Any:
    if isinstance(value, dict):
        return {key: _expand_env(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_expand_env(item) for item in value]
    if isinstance(value, str):
        return ENV_REF_RE.sub(
            lambda m: os.environ.get(m["name"], m["fallback"] or ""), value
        )
    return value


def get_config_value(config: dict, key_path: str, default: Any = None) -> Any:
    """Look up a dotted path such as ``"retrieval.max_context_chars"``.

    Returns ``default`` as soon as a segment is missing or the value at that
    point is not a table.
    """
    node: Any = config
    for key in key_path.split("."):
        if not isinstance(node, dict) or key not in node:
            return default
        node = node[key]
    return node


def get_api_key(config: dict, provider: str) -> str:
    """Return the configured credential for ``provider``, or an empty string."""
    key = get_config_value(config, f"llm.api_keys.{provider}", "")
    return key.strip() if isinstance(key, str) else ""


def get_llm_settings(config: dict, provider: Optional[str] = None) -> dict[str, Any]:
    """Collect constructor arguments for the configured generation provider.

    Args:
        config: Configuration dictionary.
        provider: Overrides ``llm.provider`` when given.

    Returns:
        Dictionary with ``provider``, ``model``, ``api_key`` and any extra
        scalar settings from the ``[llm]`` table.
    """
    section = config.get("llm", {})
    configured = section.get("provider", DEFAULT_PROVIDER)
    provider = provider or configured
    settings = {
        k: v
        for k, v in section.items()
        if k not in ("provider", "model", "api_keys") and not isinstance(v, dict)
    }
    settings["provider"] = provider
    # A configured model only applies to the configured provider.
    model = section.get("model") if provider == configured else None
    settings["model"] = model or DEFAULT_MODELS.get(provider, "")
    settings["api_key"] = get_api_key(config, provider)
    return settings
