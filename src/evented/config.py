"""Configuration for evented objects.

``EventedConfig`` controls debug logging and dispatch tracing. Pass one to
``Evented(config=...)``, or build one from the environment:

    EVENTED_DEBUG=1 EVENTED_TRACE=true EVENTED_TRACE_VERBOSITY=2 python app.py

    config = EventedConfig.from_env()
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)

ENV_PREFIX = "EVENTED_"


class EventedConfig(BaseModel):
    """Debug and tracing options for an ``Evented`` component."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    debug: bool = False
    """Log listener registration, removal and phase decisions at debug level."""

    trace: bool = False
    """Emit one trace line per delivered phase."""

    trace_verbosity: int = Field(default=1, ge=0, le=2)
    """0=minimal, 1=normal, 2=verbose (adds a detail table)."""

    trace_use_rich: bool = True
    """Print traces with Rich on stderr; otherwise log them at debug level."""

    @classmethod
    def from_env(
        cls, prefix: str = ENV_PREFIX, environ: Mapping[str, str] | None = None
    ) -> EventedConfig:
        """Build a config from ``<prefix><FIELD>`` environment variables.

        Unset variables keep their defaults. Values are validated by pydantic,
        so ``"1"``/``"true"``/``"yes"`` all enable a flag and an invalid value
        raises ``ValidationError``.
        """
        environ = os.environ if environ is None else environ
        values: dict[str, str] = {}
        for name in cls.model_fields:
            key = f"{prefix}{name.upper()}"
            if key in environ:
                values[name] = environ[key]
        if values:
            logger.debug(f"Loaded evented config from environment: {values}")
        return cls.model_validate(values)


DEFAULT_CONFIG = EventedConfig()

__all__ = ["EventedConfig", "DEFAULT_CONFIG", "ENV_PREFIX"]
