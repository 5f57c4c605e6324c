"""
Layered environment lookup for facilitator client settings.

``os.environ`` (or an explicit base mapping) is combined with an optional
``.env`` file and explicit overrides into a plain mapping consumed by
:meth:`x402_facilitator.core.config.FacilitatorConfig.from_mapping`.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Mapping, Optional

__all__ = ["FacilitatorEnvironment", "build_environment", "read_env_file"]


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
        return value[1:-1]
    return value


def read_env_file(path: str) -> Dict[str, str]:
    """
    Parse ``KEY=VALUE`` lines from a ``.env`` file.

    Blank lines, ``#`` comments and an optional ``export`` prefix are
    tolerated; surrounding quotes are stripped. A missing file yields ``{}``.
    """
    values: Dict[str, str] = {}
    try:
        data = Path(path).read_text(encoding="utf-8")
    except FileNotFoundError:
        return values

    for raw_line in data.splitlines():
        line = raw_line.strip()
        if line.startswith("export "):
            line = line[len("export "):].lstrip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        values[key.strip()] = _unquote(value.strip())
    return values


@dataclass(frozen=True)
class FacilitatorEnvironment:
    variables: Mapping[str, str]

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        return self.variables.get(key, default)


def build_environment(
    *,
    env_file: Optional[str] = ".env",
    base: Optional[Mapping[str, str]] = None,
    overrides: Optional[Mapping[str, str]] = None,
) -> FacilitatorEnvironment:
    """
    Merge ``base`` (default :data:`os.environ`), ``env_file`` and ``overrides``.

    Values already present in ``base`` win over the file; ``overrides``
    always win. Pass ``env_file=None`` to skip the file.
    """
    merged: Dict[str, str] = dict(os.environ if base is None else base)

    if env_file is not None:
        for key, value in read_env_file(env_file).items():
            merged.setdefault(key, value)

    if overrides:
        merged.update(overrides)

    return FacilitatorEnvironment(variables=merged)
