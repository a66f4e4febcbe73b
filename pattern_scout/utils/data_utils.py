"""Dataclass <-> JSON-ready dict conversion and lenient numeric parsing."""
import dataclasses
import typing
from enum import Enum
from typing import Any, Dict, Optional, Type, TypeVar, Union, get_args, get_origin

T = TypeVar("T")


def _plain(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, tuple):
        return list(value)
    return value


class SerializableMixin:
    """Gives frozen record dataclasses ``to_dict``/``from_dict``.

    Enum fields travel by value, tuples become lists, nested records recurse.
    """

    def to_dict(self) -> Dict[str, Any]:
        return dataclasses.asdict(self, dict_factory=lambda pairs: {k: _plain(v) for k, v in pairs})

    @classmethod
    def from_dict(cls: Type[T], data: Dict[str, Any]) -> T:
        """Rebuild a record, ignoring keys that are not fields."""
        if not dataclasses.is_dataclass(cls):
            raise TypeError(f"{cls.__name__} is not a dataclass")

        field_types = _field_types(cls)
        kwargs = {name: _coerce(value, field_types[name])
                  for name, value in data.items() if name in field_types}
        return cls(**kwargs)


def _field_types(cls: type) -> Dict[str, Any]:
    try:
        return typing.get_type_hints(cls)
    except (NameError, TypeError):
        return {f.name: f.type for f in dataclasses.fields(cls)}


def _coerce(value: Any, annotation: Any) -> Any:
    if value is None:
        return None

    origin = get_origin(annotation)
    if origin is Union:
        members = [a for a in get_args(annotation) if a is not type(None)]
        return _coerce(value, members[0]) if len(members) == 1 else value

    if origin in (tuple, list):
        params = get_args(annotation)
        items = [_coerce(item, params[0] if params else Any) for item in value]
        return tuple(items) if origin is tuple else items

    if not isinstance(annotation, type):
        return value
    if issubclass(annotation, Enum):
        return annotation(value)
    if issubclass(annotation, SerializableMixin) and isinstance(value, dict):
        return annotation.from_dict(value)
    if annotation is float and isinstance(value, int) and not isinstance(value, bool):
        return float(value)
    return value


def safe_float(value: Any, default: Optional[float] = None) -> Optional[float]:
    """float(value), or ``default`` when it cannot be parsed."""
    try:
        return float(value)
    except (TypeError, ValueError):
        return default
