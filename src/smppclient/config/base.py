"""
SMPP Configuration Base Classes

This module provides the base configuration class with validation and
dictionary serialization shared by every configuration section.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from enum import Enum
from typing import Any, Dict, Type, TypeVar

from ..exceptions import SMPPValidationException

T = TypeVar('T', bound='BaseConfig')


@dataclass
class BaseConfig:
    """Base configuration class with validation and serialization."""

    def validate(self) -> None:
        """Validate configuration values. Override in subclasses."""
        pass

    @classmethod
    def from_dict(cls: Type[T], data: Dict[str, Any]) -> T:
        """Create config from dictionary, ignoring unknown keys."""
        field_names = {f.name for f in fields(cls)}
        filtered_data = {k: v for k, v in data.items() if k in field_names}

        try:
            instance = cls(**cls._convert_nested(filtered_data))
            instance.validate()
            return instance
        except (TypeError, ValueError) as e:
            raise SMPPValidationException(
                f'Invalid configuration data for {cls.__name__}: {e}',
                field_name='config_data',
                validation_rule='type_conversion',
                original_error=e,
            ) from e

    @classmethod
    def _convert_nested(cls, data: Dict[str, Any]) -> Dict[str, Any]:
        """Hook for subclasses holding nested sections or enums."""
        return data

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary."""
        result: Dict[str, Any] = {}
        for field_name, field_value in self.__dict__.items():
            if isinstance(field_value, BaseConfig):
                result[field_name] = field_value.to_dict()
            elif isinstance(field_value, Enum):
                result[field_name] = field_value.value
            elif isinstance(field_value, list):
                result[field_name] = list(field_value)
            else:
                result[field_name] = field_value
        return result


def require_byte(name: str, value: int) -> None:
    if not (0 <= value <= 255):
        raise SMPPValidationException(
            f'Invalid {name}: {value} (must be 0-255)',
            field_name=name,
            field_value=str(value),
            validation_rule='byte_range',
        )


def require_max_length(name: str, value: str, max_length: int) -> None:
    """Check value fits a C-string field of max_length octets (terminator included)."""
    if len(value) >= max_length:
        raise SMPPValidationException(
            f'{name} too long: {len(value)} > {max_length - 1}',
            field_name=name,
            field_value=value,
            validation_rule='max_length',
        )
