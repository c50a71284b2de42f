from dataclasses import dataclass, field, fields, is_dataclass
from enum import Enum
from typing import Dict, Any, TypeVar, Type

from ..utils import camel_to_snake_case, snake_to_camel_case

T = TypeVar('T')

@dataclass
class BaseModel:
    """
    Base model class that maps camelCase wire keys onto snake_case fields
    when reading, and back to camelCase when serializing.

    Fields whose value is None are omitted from the serialized form, so an
    unset optional field is never emitted as an empty string. Empty lists and
    zero numbers are kept.
    """
    _raw_data: Dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @classmethod
    def camel_to_snake(cls, camel_case: str) -> str:
        """Convert camelCase string to snake_case"""
        if not camel_case:
            return camel_case
        return camel_to_snake_case(camel_case)

    @classmethod
    def snake_to_camel(cls, snake_case: str) -> str:
        """Convert snake_case string to camelCase"""
        if not snake_case:
            return snake_case
        return snake_to_camel_case(snake_case)

    @classmethod
    def from_api_response(cls: Type[T], data: Dict[str, Any]) -> T:
        """Create an instance from a flat dictionary with camelCase or snake_case keys"""
        data = data or {}
        instance_args = {}

        for field_info in fields(cls):
            field_name = field_info.name
            if field_name.startswith('_'):
                continue

            # Look for direct match first (for keys already in snake_case)
            if field_name in data:
                instance_args[field_name] = data.get(field_name)
            else:
                camel_name = cls.snake_to_camel(field_name)
                if camel_name in data:
                    instance_args[field_name] = data.get(camel_name)

        instance_args['_raw_data'] = data.copy()
        return cls(**instance_args)

    def get_raw(self, key: str, default: Any = None) -> Any:
        """Access any field from the raw data"""
        return self._raw_data.get(key, default)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to a dictionary with camelCase keys, omitting None fields"""
        result: Dict[str, Any] = {}
        for field_info in fields(self):
            if field_info.name.startswith('_'):
                continue
            value = getattr(self, field_info.name)
            if value is None:
                continue
            result[self.snake_to_camel(field_info.name)] = _serialize(value)
        return result


def _serialize(value: Any) -> Any:
    """Recursively serialize nested models to primitive types"""
    if isinstance(value, BaseModel):
        return value.to_dict()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {k: _serialize(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_serialize(item) for item in value]
    if is_dataclass(value) and not isinstance(value, type):
        return {snake_to_camel_case(f.name): _serialize(getattr(value, f.name))
                for f in fields(value) if not f.name.startswith('_')}
    return value
