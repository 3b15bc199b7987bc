"""Environment and ``.env`` configuration helpers.

Purpose
-------
Let operators configure the UDP output through environment variables (and
optionally a nearby ``.env`` file) without touching host code.

Contents
--------
* :data:`ENV_KEYS` - option key to environment variable mapping.
* :func:`load_output_config` - merge call arguments with environment overrides.
* :func:`enable_dotenv` / :func:`should_use_dotenv` - ``.env`` loading policy.

System Role
-----------
Outer layer. The domain :class:`~lib_udp_output.domain.config.OutputConfig`
stays unaware of where its values came from.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from dotenv import find_dotenv, load_dotenv

from .domain.config import CK_HOST, CK_PARAMS, CK_PORT, CK_SEPARATOR, OutputConfig

LOGGER = logging.getLogger(__name__)

DOTENV_ENV_VAR = "UDP_OUTPUT_USE_DOTENV"
ENV_KEYS: dict[str, str] = {
    CK_HOST: "UDP_OUTPUT_HOST",
    CK_PORT: "UDP_OUTPUT_PORT",
    CK_PARAMS: "UDP_OUTPUT_PARAMS",
    CK_SEPARATOR: "UDP_OUTPUT_SEPARATOR",
}

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off"}

_DOTENV_PATH: Path | None = None
_DOTENV_ATTEMPTED = False


def load_output_config(
    *,
    host: str | None = None,
    port: int | str | None = None,
    params: str | None = None,
    separator: str | None = None,
    environ: Mapping[str, str] | None = None,
) -> OutputConfig:
    """Build an :class:`OutputConfig` from arguments and the environment.

    Environment variables listed in :data:`ENV_KEYS` take precedence over the
    keyword arguments so deployments can override values baked into code.

    Examples
    --------
    >>> env = {"UDP_OUTPUT_HOST": "collector", "UDP_OUTPUT_PORT": "514"}
    >>> load_output_config(host="ignored", port=1, params="a,b", environ=env).address
    ('collector', 514)
    """

    env = os.environ if environ is None else environ
    values: dict[str, Any] = {
        CK_HOST: host,
        CK_PORT: port,
        CK_PARAMS: params,
        CK_SEPARATOR: separator,
    }
    for key, variable in ENV_KEYS.items():
        override = env.get(variable)
        if override is not None and (override.strip() or key == CK_SEPARATOR):
            values[key] = override
    return OutputConfig.from_mapping(values)


def should_use_dotenv(*, explicit: bool | None = None, env_value: str | None = None) -> bool:
    """Decide whether ``.env`` loading is requested.

    An explicit CLI choice wins; otherwise :data:`DOTENV_ENV_VAR` decides.

    Examples
    --------
    >>> should_use_dotenv(explicit=False, env_value="1")
    False
    >>> should_use_dotenv(env_value="yes")
    True
    >>> should_use_dotenv()
    False
    """

    if explicit is not None:
        return explicit
    if env_value is None:
        return False
    normalized = env_value.strip().lower()
    if normalized in _TRUTHY:
        return True
    if normalized and normalized not in _FALSY:
        LOGGER.warning("Ignoring unrecognised %s value %r", DOTENV_ENV_VAR, env_value)
    return False


def enable_dotenv() -> Path | None:
    """Load the nearest ``.env`` (searching upwards from the cwd) once.

    Existing environment variables are never overridden. Returns the resolved
    path of the loaded file, or ``None`` when no file was found.
    """

    global _DOTENV_PATH, _DOTENV_ATTEMPTED
    if _DOTENV_ATTEMPTED:
        return _DOTENV_PATH
    _DOTENV_ATTEMPTED = True
    found = find_dotenv(usecwd=True)
    if not found:
        LOGGER.debug("No .env file found from %s upwards", Path.cwd())
        return None
    path = Path(found).resolve()
    load_dotenv(path, override=False)
    _DOTENV_PATH = path
    return path


def _reset_dotenv_state_for_testing() -> None:
    global _DOTENV_PATH, _DOTENV_ATTEMPTED
    _DOTENV_PATH = None
    _DOTENV_ATTEMPTED = False


__all__ = [
    "DOTENV_ENV_VAR",
    "ENV_KEYS",
    "enable_dotenv",
    "load_output_config",
    "should_use_dotenv",
]
