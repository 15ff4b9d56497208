"""
Environment variables understood by the calculator backend.

Public variables begin with ``COMPOUND_CALC_``.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import List, Optional


class _EnvironmentVariable:
    """
    Represents an environment variable.
    """

    def __init__(self, name: str, type_: type, default):
        self.name = name
        self.type = type_
        self.default = default

    @property
    def defined(self) -> bool:
        return self.name in os.environ

    def get_raw(self) -> Optional[str]:
        return os.getenv(self.name)

    def get(self):
        """
        Reads the value of the environment variable if it exists and converts it to the desired
        type. Otherwise, returns the default value.
        """
        if (val := self.get_raw()) is not None:
            try:
                return self.type(val)
            except Exception as e:
                raise ValueError(f"Failed to convert {val!r} for {self.name}: {e}")
        return self.default

    def __repr__(self) -> str:
        return repr(self.name)


class _ChoiceEnvironmentVariable(_EnvironmentVariable):
    def __init__(self, name: str, choices: List[str], default: str):
        super().__init__(name, str, default)
        self.choices = choices

    def get(self) -> str:
        value = super().get().strip().lower()
        if value not in self.choices:
            raise ValueError(f"{self.name} must be one of {', '.join(self.choices)}, got {value!r}")
        return value


def _split_origins(value: str) -> List[str]:
    return [origin.strip() for origin in value.split(",") if origin.strip()]


#: Storage backend for history and form state: ``memory``, ``json`` or ``sqlite``.
#: (default: ``json``)
COMPOUND_CALC_STORAGE_BACKEND = _ChoiceEnvironmentVariable(
    "COMPOUND_CALC_STORAGE_BACKEND", ["memory", "json", "sqlite"], "json"
)

#: File used by the ``json`` and ``sqlite`` backends.
#: (default: ``calculator_data.json`` / ``calculator_data.db`` in the working directory)
COMPOUND_CALC_STORAGE_PATH = _EnvironmentVariable("COMPOUND_CALC_STORAGE_PATH", str, None)

#: Comma-separated origins allowed to call ``/api/*``.
COMPOUND_CALC_CORS_ORIGINS = _EnvironmentVariable(
    "COMPOUND_CALC_CORS_ORIGINS",
    _split_origins,
    ["http://localhost:5173", "http://127.0.0.1:5173"],
)

#: Logging level. Valid values: DEBUG, INFO, WARNING, ERROR, CRITICAL.
#: (default: ``INFO``)
COMPOUND_CALC_LOG_LEVEL = _EnvironmentVariable("COMPOUND_CALC_LOG_LEVEL", str, "INFO")

#: Currency symbol used in formatted summaries. (default: ``₱``)
COMPOUND_CALC_CURRENCY_SYMBOL = _EnvironmentVariable("COMPOUND_CALC_CURRENCY_SYMBOL", str, "₱")


@dataclass
class Settings:
    storage_backend: str = "json"
    storage_path: Optional[str] = None
    cors_origins: List[str] = field(
        default_factory=lambda: ["http://localhost:5173", "http://127.0.0.1:5173"]
    )
    log_level: str = "INFO"
    currency_symbol: str = "₱"


def load_settings() -> Settings:
    return Settings(
        storage_backend=COMPOUND_CALC_STORAGE_BACKEND.get(),
        storage_path=COMPOUND_CALC_STORAGE_PATH.get(),
        cors_origins=COMPOUND_CALC_CORS_ORIGINS.get(),
        log_level=COMPOUND_CALC_LOG_LEVEL.get(),
        currency_symbol=COMPOUND_CALC_CURRENCY_SYMBOL.get(),
    )
