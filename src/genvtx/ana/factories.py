"""Construct an analysis script module class from its name."""

from genvtx.utils.factory import instantiate, module_dict

from . import script

# Build a dictionary of available analysis scripts
ANA_DICT = module_dict(script)


def ana_script_factory(name, cfg, overwrite=None, log_dir=None, prefix=None):
    """Instantiates an analysis script from a configuration dictionary.

    Parameters
    ----------
    name : str
        Name of the analysis script
    cfg : dict
        Analysis script configuration
    overwrite : bool, optional
        If `True`, overwrite the CSV logs if they already exist
    log_dir : str, optional
        Output CSV file directory
    prefix : str, optional
        Name to prefix every output CSV file with

    Returns
    -------
    object
         Initialized analysis script object
    """
    # Provide the name to the configuration
    cfg = dict(cfg) if cfg is not None else {}
    cfg.setdefault("name", name)

    # Fill in the driver-level parameters, if they are not specified locally
    kwargs = {}
    defaults = {"overwrite": overwrite, "log_dir": log_dir, "prefix": prefix}
    for key, value in defaults.items():
        if value is not None and key not in cfg:
            kwargs[key] = value

    # Instantiate the analysis script module
    return instantiate(ANA_DICT, cfg, **kwargs)
