"""Helper functions used to merge and edit configuration dictionaries."""

from copy import deepcopy
from typing import Any, Dict, List, Tuple

import yaml

from .errors import ConfigPathError, ConfigTypeError

__all__ = ["deep_merge", "parse_value", "set_nested_value", "split_directives"]


def deep_merge(
    base_dict: Dict[str, Any], update_dict: Dict[str, Any]
) -> Dict[str, Any]:
    """Recursively merge `update_dict` into `base_dict`.

    Parameters
    ----------
    base_dict : Dict[str, Any]
        Base dictionary
    update_dict : Dict[str, Any]
        Dictionary whose values take precedence

    Returns
    -------
    Dict[str, Any]
        Merged dictionary (new copy)
    """
    result = deepcopy(base_dict)
    for key, value in update_dict.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = deepcopy(value)

    return result


def parse_value(value_str: Any) -> Any:
    """Parse a string value into the appropriate Python type.

    Parameters
    ----------
    value_str : Any
        Value to parse (if string, attempts YAML parsing)

    Returns
    -------
    Any
        Parsed value
    """
    if not isinstance(value_str, str) or value_str.strip() == "":
        return value_str

    try:
        return yaml.safe_load(value_str)
    except yaml.YAMLError:
        return value_str


def set_nested_value(
    config: Dict[str, Any],
    key_path: str,
    value: Any,
    delete: bool = False,
    only_if_exists: bool = False,
) -> Tuple[Dict[str, Any], bool]:
    """Set or delete a nested value using dot notation, in place.

    Parameters
    ----------
    config : Dict[str, Any]
        Configuration dictionary
    key_path : str
        Dot-separated path (e.g., "build.vertex.pos_tolerance")
    value : Any
        Value to set (ignored if `delete` is `True`)
    delete : bool, default False
        If `True`, delete the key
    only_if_exists : bool, default False
        If `True`, only set the value if its parent path exists

    Returns
    -------
    Tuple[Dict[str, Any], bool]
        (modified config, whether the operation was applied)
    """
    keys = key_path.split(".")
    current = config
    for i, key in enumerate(keys[:-1]):
        if key not in current:
            if delete:
                partial_path = ".".join(keys[: i + 1])
                raise ConfigPathError(
                    f"Cannot delete '{key_path}': path '{partial_path}' does not exist"
                )
            if only_if_exists:
                return config, False
            current[key] = {}

        elif not isinstance(current[key], dict):
            raise ConfigTypeError(
                f"Cannot set '{key_path}': '{key}' is not a dictionary"
            )

        current = current[key]

    final_key = keys[-1]
    if delete:
        if final_key not in current:
            raise ConfigPathError(f"Cannot delete '{key_path}': key does not exist")
        del current[final_key]

    else:
        current[final_key] = value

    return config, True


def split_directives(config_dict: Any) -> Tuple[List[str], Dict[str, Any], Any]:
    """Separates the `include` and `override` directives from the content.

    Parameters
    ----------
    config_dict : Any
        Loaded YAML configuration

    Returns
    -------
    Tuple[List[str], Dict[str, Any], Any]
        (includes, overrides, cleaned configuration)
    """
    if not isinstance(config_dict, dict):
        return [], {}, config_dict

    includes, overrides, cleaned = [], {}, {}
    for key, value in config_dict.items():
        if key == "include":
            if isinstance(value, str):
                includes.append(value)
            elif isinstance(value, list):
                includes.extend(value)
            else:
                raise ConfigTypeError(
                    f"'include' must be a string or list of strings, got {type(value)}"
                )

        elif key == "override":
            if not isinstance(value, dict):
                raise ConfigTypeError(
                    f"'override' must be a dictionary, got {type(value)}"
                )
            overrides = value

        else:
            cleaned[key] = value

    return includes, overrides, cleaned
