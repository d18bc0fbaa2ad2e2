"""YAML configuration loader.

Configuration language:

Include semantics:
    include: base.yaml               # Single file
    include: [base.yaml, other.yaml] # Multiple files (order matters)
    key: !include inline.yaml        # Inline include

Path resolution:
    ana:
      event:
        log_dir: !path ../logs       # Resolved relative to this file

Override semantics:
    override:
      build.vertex.pos_tolerance: 1.0e-3
      base.verbosity: debug

Application order:
    1. Included files are loaded recursively and merged in order
    2. The content of the file is merged on top of its includes
    3. The overrides of the file are applied; those which target a path
       that does not exist yet propagate to the including file
"""

import os
from typing import Any, Dict, List, Optional, TextIO, Tuple, Union, cast

import yaml

from genvtx.utils.logger import logger

from .errors import ConfigCycleError, ConfigIncludeError, ConfigTypeError
from .operations import deep_merge, parse_value, set_nested_value, split_directives

__all__ = ["load_config", "resolve_config_path", "ConfigLoader"]

# Environment variable which lists additional configuration directories
CONFIG_PATH_ENV = "GENVTX_CONFIG_PATH"


def resolve_config_path(
    filename: str, current_dir: str, search_paths: Optional[List[str]] = None
) -> str:
    """Resolve a configuration file path.

    Resolution order:
    1. If absolute path, return as-is
    2. Try relative to `current_dir` (with and without .yaml/.yml extension)
    3. Search through the `GENVTX_CONFIG_PATH` directories

    Parameters
    ----------
    filename : str
        Config filename or path to resolve
    current_dir : str
        Directory of the config file doing the including
    search_paths : List[str], optional
        List of search paths (defaults to the `GENVTX_CONFIG_PATH` variable)

    Returns
    -------
    str
        Resolved absolute path
    """
    if os.path.isabs(filename):
        if os.path.exists(filename):
            return filename
        raise ConfigIncludeError(f"Absolute path not found: {filename}")

    if search_paths is None:
        env_paths = os.environ.get(CONFIG_PATH_ENV, "")
        search_paths = [p.strip() for p in env_paths.split(":") if p.strip()]

    for search_dir in [current_dir, *search_paths]:
        path = os.path.join(search_dir, filename)
        candidates = [path]
        if not filename.endswith((".yaml", ".yml")):
            candidates += [path + ".yaml", path + ".yml"]

        for candidate in candidates:
            if os.path.exists(candidate):
                return os.path.abspath(candidate)

    raise ConfigIncludeError(
        f"Config file '{filename}' not found relative to {current_dir} or in "
        f"${CONFIG_PATH_ENV}: {search_paths}"
    )


class ConfigLoader(yaml.SafeLoader):
    """YAML loader with `!include` and `!path` tag support."""

    def __init__(self, stream: TextIO) -> None:
        """Initialize the loader.

        Parameters
        ----------
        stream : TextIO
            File stream (from `open()`)
        """
        self._root = os.path.split(stream.name)[0]
        super().__init__(stream)

    def include(self, node: yaml.Node) -> Any:
        """Load and include a YAML file inline.

        Parameters
        ----------
        node : yaml.Node
            YAML node containing the filename

        Returns
        -------
        Any
            Loaded configuration content
        """
        filename = self.construct_scalar(cast(yaml.ScalarNode, node))
        resolved_path = resolve_config_path(filename, self._root)

        with open(resolved_path, "r", encoding="utf-8") as f:
            return yaml.load(f, Loader=ConfigLoader)

    def resolve_path(self, node: yaml.Node) -> str:
        """Resolve a path relative to the current config file.

        Parameters
        ----------
        node : yaml.Node
            YAML node containing the path

        Returns
        -------
        str
            Absolute path
        """
        path = self.construct_scalar(cast(yaml.ScalarNode, node))

        return os.path.abspath(os.path.join(self._root, path))


# Register the !include and !path constructors
ConfigLoader.add_constructor("!include", ConfigLoader.include)
ConfigLoader.add_constructor("!path", ConfigLoader.resolve_path)


def _load_config_recursive(
    cfg_path: str, stack: Tuple[str, ...] = ()
) -> Tuple[Dict[str, Any], Dict[str, Any]]:
    """Loads one configuration file and everything it includes.

    Parameters
    ----------
    cfg_path : str
        Absolute path to the configuration file
    stack : Tuple[str, ...]
        Files currently being loaded, used to detect include cycles

    Returns
    -------
    Tuple[Dict[str, Any], Dict[str, Any]]
        (merged configuration, overrides which could not be applied)
    """
    if cfg_path in stack:
        raise ConfigCycleError([*stack, cfg_path])

    try:
        with open(cfg_path, "r", encoding="utf-8") as cfg_file:
            raw = yaml.load(cfg_file, Loader=ConfigLoader)
    except yaml.YAMLError as err:
        raise ConfigIncludeError(f"Could not parse {cfg_path}: {err}") from err

    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ConfigTypeError(
            f"The configuration in {cfg_path} must be a dictionary, got {type(raw)}."
        )

    includes, overrides, content = split_directives(raw)

    # Merge the included files, in order
    config, pending = {}, {}
    cfg_dir = os.path.dirname(cfg_path)
    for include in includes:
        include_path = resolve_config_path(include, cfg_dir)
        include_cfg, include_pending = _load_config_recursive(
            include_path, (*stack, cfg_path)
        )
        config = deep_merge(config, include_cfg)
        pending.update(include_pending)

    # Merge the content of this file on top of its includes
    config = deep_merge(config, content)

    # Apply the overrides, propagate those which do not apply yet
    pending.update(overrides)
    unapplied = {}
    for key_path, value in pending.items():
        config, applied = set_nested_value(
            config, key_path, parse_value(value), only_if_exists=True
        )
        if not applied:
            unapplied[key_path] = value

    return config, unapplied


def load_config(
    cfg_path: str, overrides: Optional[Union[Dict[str, Any], List[str]]] = None
) -> Dict[str, Any]:
    """Load a configuration file.

    Parameters
    ----------
    cfg_path : str
        Path to the configuration file
    overrides : Union[Dict[str, Any], List[str]], optional
        Additional overrides to apply, either as a dictionary which maps
        dot-separated paths onto values or as a list of `path=value` strings

    Returns
    -------
    Dict[str, Any]
        Loaded and merged configuration
    """
    cfg_path = os.path.abspath(cfg_path)
    if not os.path.isfile(cfg_path):
        raise ConfigIncludeError(f"Configuration file not found: {cfg_path}")

    config, unapplied = _load_config_recursive(cfg_path)
    for key_path in unapplied:
        logger.warning(
            "Override of `%s` skipped: its parent path does not exist.", key_path
        )

    # Apply the explicit overrides, creating missing paths
    if overrides is not None:
        if not isinstance(overrides, dict):
            override_dict = {}
            for entry in overrides:
                if "=" not in entry:
                    raise ConfigTypeError(
                        f"Overrides must be of the form `path=value`, got `{entry}`."
                    )
                key_path, value = entry.split("=", 1)
                override_dict[key_path.strip()] = value.strip()
            overrides = override_dict

        for key_path, value in overrides.items():
            config, _ = set_nested_value(config, key_path, parse_value(value))

    return config
