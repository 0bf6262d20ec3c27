"""
Configuration Validator
-----------------------
Strict schema check of raw configuration dictionaries against the config
dataclasses.

A key in the YAML file that has no matching field would otherwise be silently
ignored by the merge step, so the loader runs this first and refuses to start.
"""

from dataclasses import fields, is_dataclass
from typing import Dict, Type, Any, Set, cast, get_type_hints

from .errors import InvalidConfig


def validate_keys(
    raw_config: Dict[str, Any], data_class: Type[Any], path: str = ""
) -> None:
    """
    Recursively checks that every key in `raw_config` is a field of `data_class`.

    Args:
        raw_config (Dict[str, Any]): Parsed YAML mapping.
        data_class (Type[Any]): Dataclass type the mapping is meant to populate.
        path (str, optional): Dot-path of the current section, for messages.

    Raises:
        InvalidConfig: If `raw_config` holds keys that `data_class` does not define.
    """
    allowed_fields: Set[str] = {f.name for f in fields(data_class)}

    unknown_keys = set(raw_config.keys()) - allowed_fields

    if unknown_keys:
        error_path = path if path else "root"
        raise InvalidConfig(
            f"Config Error: Unknown keys detected at '{error_path}': {sorted(unknown_keys)}. "
            f"Allowed keys: {sorted(allowed_fields)}"
        )

    # config modules use postponed annotations, so field.type may be a str
    hints = get_type_hints(data_class)

    for f in fields(data_class):
        value = raw_config.get(f.name)
        sub_type = hints.get(f.name, f.type)

        if is_dataclass(sub_type) and isinstance(value, dict):
            new_path = f"{path}.{f.name}" if path else f.name
            validate_keys(value, cast(Type[Any], sub_type), path=new_path)
