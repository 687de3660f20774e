"""Exceptions raised by the diabetes EDA pipeline."""

from typing import Any, Dict, List, Optional


class DiabetesDataError(Exception):
    """Base exception for all data pipeline errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


class MissingColumnError(DiabetesDataError):
    """A required column is absent from the input."""

    def __init__(self, columns: List[str]):
        self.columns = sorted(columns)
        super().__init__(
            f"Missing required columns: {self.columns}",
            details={"columns": self.columns},
        )


class InvalidSchemaError(DiabetesDataError):
    """A required column has the wrong type or out-of-range values."""

    def __init__(self, errors: List[str]):
        self.errors = list(errors)
        super().__init__(
            f"Schema validation failed with {len(self.errors)} error(s)",
            details={"errors": self.errors},
        )
