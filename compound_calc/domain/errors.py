from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Dict, List


@dataclass(frozen=True)
class FieldError:
    field: str
    message: str

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)


class CompoundCalcError(Exception):
    """Base class for errors raised by the calculator package."""


class ParamsValidationError(CompoundCalcError, ValueError):
    def __init__(self, errors: List[FieldError]):
        super().__init__("; ".join(f"{error.field}: {error.message}" for error in errors))
        self.errors = errors


class CalculationOverflowError(CompoundCalcError, ArithmeticError):
    """The balance left the double-precision range."""


class StorageError(CompoundCalcError):
    """The key-value backend could not complete a write."""


class HistoryWriteError(CompoundCalcError):
    """A calculation succeeded but could not be persisted to history."""
