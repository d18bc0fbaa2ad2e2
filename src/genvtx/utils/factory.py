"""Functions which instantiate configurable modules from dictionaries.

A YAML block of the analysis configuration is converted into an instance of
the class it names, after checking that the class exists.
"""

from .logger import logger


def module_dict(module):
    """Maps the names of the classes exposed by a module onto the classes.

    Each class is reachable under its own name, its `name` attribute and any
    of its `aliases`.

    Parameters
    ----------
    module : module
        Module from which to fetch the classes

    Returns
    -------
    dict
        Dictionary which maps acceptable class names to classes themselves
    """
    mod_dict = {}
    for cls_name in getattr(module, "__all__", dir(module)):
        if cls_name.startswith("_"):
            continue

        # Only consider classes defined within the module of interest
        cls = getattr(module, cls_name)
        if not isinstance(cls, type) or module.__name__ not in cls.__module__:
            continue

        mod_dict[cls_name] = cls
        if getattr(cls, "name", None):
            mod_dict[cls.name] = cls
        for alias in getattr(cls, "aliases", ()):
            mod_dict[alias] = cls

    return mod_dict


def instantiate(mod_dict, cfg, **kwargs):
    """Instantiates the class named in a configuration dictionary.

    The configuration is either the class name alone or a dictionary of the
    form:

    .. code-block:: yaml

        vertex_count:
          name: vertex_count
          nbins: 20

    Parameters
    ----------
    mod_dict : dict
        Dictionary which maps a class name onto an object class.
    cfg : Union[str, dict]
        Configuration dictionary (or simply the class name)
    **kwargs : dict, optional
        Additional parameters to pass to the class constructor

    Returns
    -------
    object
        Instantiated object
    """
    if isinstance(cfg, str):
        cfg = {"name": cfg}

    config = dict(cfg)
    assert "name" in config, "Could not find the name of the class under `name`"
    class_name = config.pop("name")
    if class_name not in mod_dict:
        raise ValueError(
            f"Could not find '{class_name}' in the dictionary which maps names "
            f"to classes. Available names: {sorted(mod_dict.keys())}"
        )

    # Arguments passed explicitly cannot also be configured
    for key in kwargs:
        assert key not in config, (
            f"The keyword argument {key} is provided both in the "
            "configuration and by the caller. Ambiguous."
        )
    config.update(kwargs)

    cls = mod_dict[class_name]
    try:
        return cls(**config)

    except TypeError:
        logger.error(
            "Failed to instantiate %s with these arguments: %s",
            cls.__name__,
            config,
        )
        raise
