"""Manages the operation of analysis scripts."""

from collections import OrderedDict

import numpy as np

from genvtx.utils.stopwatch import StopwatchManager

from .factories import ana_script_factory


class AnaManager:
    """Manager class to initialize and execute analysis scripts.

    Analysis scripts use the derived event collections and produce histograms
    and simple CSV files.

    It loads all the analysis scripts and feeds them data, along with the
    histogram collection they fill.
    """

    def __init__(self, cfg, log_dir=None, prefix=None, overwrite=None):
        """Initialize the analysis manager.

        Parameters
        ----------
        cfg : dict
            Analysis script configurations
        log_dir : str, optional
            Output CSV file directory
        prefix : str, optional
            Name to prefix every output CSV file with
        overwrite : bool, optional
            If `True`, overwrite the CSV logs if they already exist
        """
        # Loop over the analyzer modules and get their priorities
        cfg = {k: dict(v) if v is not None else {} for k, v in cfg.items()}
        keys = np.array(list(cfg.keys()))
        priorities = -np.ones(len(keys), dtype=np.int32)
        for i, k in enumerate(keys):
            if "priority" in cfg[k]:
                priorities[i] = cfg[k].pop("priority")

        # Add the modules to a processor list in decreasing order of priority
        self.watch = StopwatchManager()
        self.modules = OrderedDict()
        keys = keys[np.argsort(-priorities, kind="stable")]
        for k in keys:
            # Profile the module
            self.watch.initialize(k)

            # Append
            self.modules[k] = ana_script_factory(
                k, cfg[k], overwrite=overwrite, log_dir=log_dir, prefix=prefix
            )

    def __call__(self, data, hists):
        """Pass one event through the analysis scripts.

        Parameters
        ----------
        data : dict
            Dictionary of data products
        hists : HistogramCollection
            Histograms filled across events
        """
        # Loop over the analysis script modules
        for key, module in self.modules.items():
            self.watch.start(key)
            result = module(data, hists)
            self.watch.stop(key)

            # Update the input dictionary
            if result is not None:
                data.update(**result)
