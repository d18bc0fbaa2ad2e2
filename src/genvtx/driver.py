"""Event aggregator driver class.

Takes care of everything in one centralized place:
- Derived collection building
- Analysis script execution
- Histogram accumulation
- Writing logs and histograms to file
"""

import os
from datetime import datetime

import psutil
import yaml

from .ana import AnaManager, HistogramCollection
from .construct import BuildManager
from .io.write import CSVWriter
from .utils.logger import logger
from .utils.stopwatch import StopwatchManager
from .version import __version__

__all__ = ["Driver"]


class Driver:
    """Central event aggregator driver.

    Processes global configuration and runs the appropriate modules on each
    event:
      1. Build the derived collections (generator vertices, jets)
      2. Run analysis scripts, which fill the shared histograms
      3. Log the event

    It takes a configuration dictionary of the form:

    .. code-block:: yaml

        base:
          <Base driver configuration>
        build:
          <Builder configurations>
        ana:
          <Analysis scripts>
    """

    def __init__(self, cfg):
        """Initializes the class attributes.

        Parameters
        ----------
        cfg : dict
            Global configuration dictionary
        """
        # Initialize the timers and the configuration dictionary
        self.watch = StopwatchManager()
        self.watch.initialize("iteration")

        # Process the full configuration dictionary and store it
        base, build, ana = self.process_config(**cfg)

        # Initialize the base driver configuration parameters
        self.initialize_base(**base)

        # Initialize the derived collection builder
        self.watch.initialize("build")
        self.builder = BuildManager(**build)

        # Initialize the analysis scripts
        self.ana = None
        if ana is not None:
            self.watch.initialize("ana")
            self.ana = AnaManager(
                ana,
                log_dir=self.log_dir,
                prefix=self.log_prefix,
                overwrite=self.overwrite_log,
            )

        # Initialize the histograms shared across events
        self.hists = HistogramCollection()
        self.num_events = 0
        self.logger = None

    def process_config(self, build, base=None, ana=None):
        """Reads the configuration and dumps it to the logger.

        Parameters
        ----------
        build : dict
            Derived collection building configuration dictionary
        base : dict, optional
            Base driver configuration dictionary
        ana : dict, optional
            Analysis script configuration dictionary

        Returns
        -------
        dict
            Processed configuration
        """
        # If there is no base configuration, make it empty (will use defaults)
        if base is None:
            base = {}

        # Set the verbosity of the logger
        verbosity = base.get("verbosity", "info")
        logger.setLevel(verbosity.upper())

        # Rebuild global configuration dictionary
        self.cfg = {"base": base, "build": build}
        if ana is not None:
            self.cfg["ana"] = ana

        # Log environment information and configuration
        logger.info("Release version: %s\n", __version__)
        logger.info(yaml.dump(self.cfg, default_flow_style=None, sort_keys=False))

        return base, build, ana

    def initialize_base(
        self,
        log_dir="logs",
        log_prefix=None,
        overwrite_log=False,
        log_step=1,
        log_file=True,
        hist_file=None,
        verbosity="info",
    ):
        """Initialize the base driver parameters.

        Parameters
        ----------
        log_dir : str, default 'logs'
            Path to the directory where the logs and histograms are written to
        log_prefix : str, optional
            Name to prefix every output file with
        overwrite_log : bool, default False
            If True, overwrite the output files even if they already exist
        log_step : int, default 1
            Number of events before the progress is logged (1: every event)
        log_file : bool, default True
            If True, store the per-event timing and memory usage to CSV
        hist_file : str, optional
            If specified, also store the histograms to this ROOT file, in
            the log directory
        verbosity : str, default 'info'
            Verbosity level to pass to the `logging` module. Pick one of
            'debug', 'info', 'warning', 'error', 'critical'.
        """
        assert log_step > 0, f"The `log_step` must be positive, got {log_step}."

        self.log_dir = log_dir
        self.log_prefix = log_prefix
        self.overwrite_log = overwrite_log
        self.log_step = log_step
        self.log_file = log_file
        self.hist_file = hist_file

        # Make a directory if it does not exist
        if self.log_dir:
            os.makedirs(self.log_dir, exist_ok=True)

    def initialize_log(self):
        """Initialize the output log for this driver process."""
        log_name = "genvtx_log.csv"
        if self.log_prefix:
            log_name = f"{self.log_prefix}_{log_name}"

        log_path = os.path.join(self.log_dir, log_name)
        self.logger = CSVWriter(log_path, overwrite=self.overwrite_log)

    def run(self, events):
        """Loop over the events, process them.

        Parameters
        ----------
        events : Iterable[dict]
            Event dictionaries

        Returns
        -------
        HistogramCollection
            Histograms accumulated so far
        """
        for event in events:
            self.process(event)

        return self.hists

    def process(self, event):
        """Process one event.

        Parameters
        ----------
        event : dict
            Dictionary of event records

        Returns
        -------
        dict
            Event dictionary, updated with the derived collections
        """
        # Work on a shallow copy, give the event an index if it has none
        data = dict(event)
        data.setdefault("index", self.num_events)
        tstamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")

        # Discard the timers left running by an event which failed
        for watch in self.watch.values():
            if watch.running:
                watch.abort()

        self.watch.start("iteration")

        # 1. Build the derived collections
        self.watch.start("build")
        self.builder(data)
        self.watch.stop("build")

        # 2. Run scripts, if requested
        if self.ana is not None:
            self.watch.start("ana")
            self.ana(data, self.hists)
            self.watch.stop("ana")

        self.watch.stop("iteration")

        # 3. Log the event
        self.log(data, tstamp)
        self.num_events += 1

        return data

    def log(self, data, tstamp):
        """Log relevant information to CSV files and stdout.

        Parameters
        ----------
        data : dict
            Dictionary of data products to extract scalars from
        tstamp : str
            Time when this event was processed
        """
        # Fetch the basics
        log_dict = {"iter": self.num_events, "index": data["index"]}

        # Fetch the memory usage (in GB)
        log_dict["cpu_mem"] = psutil.virtual_memory().used / 1.0e9
        log_dict["cpu_mem_perc"] = psutil.virtual_memory().percent

        # Fetch the times
        suff = "_time"
        for key, watch in self.watch.items():
            time, time_sum = watch.time, watch.time_sum
            log_dict[f"{key}{suff}"] = time.wall
            log_dict[f"{key}{suff}_cpu"] = time.cpu
            log_dict[f"{key}{suff}_sum"] = time_sum.wall
            log_dict[f"{key}{suff}_sum_cpu"] = time_sum.cpu

        # Record the size of the derived collections
        for key in self.builder.product_keys:
            if key in data:
                log_dict[f"num_{key}"] = len(data[key])

        # Record
        if self.log_file:
            if self.logger is None:
                self.initialize_log()
            self.logger.append(log_dict)

        # If requested, log out basics of the process
        if ((self.num_events + 1) % self.log_step) == 0:
            logger.debug(
                "Event %s (iter. %d) @ %s: %.3f s, %d vertices, %.2f GB",
                data["index"],
                self.num_events,
                tstamp,
                log_dict["iteration_time"],
                log_dict.get("num_gen_vertices", 0),
                log_dict["cpu_mem"],
            )

    def finalize(self):
        """Persists the histograms and logs a summary of the process.

        Returns
        -------
        List[str]
            Paths to the histogram CSV files written
        """
        logger.info("Processed %d events.", self.num_events)
        file_names = self.hists.write(
            self.log_dir, prefix=self.log_prefix, overwrite=self.overwrite_log
        )
        if self.hist_file:
            root_name = self.hist_file
            if self.log_prefix:
                root_name = f"{self.log_prefix}_{root_name}"
            self.hists.write_root(os.path.join(self.log_dir, root_name))

        # Dump the average time spent in each step
        if self.num_events:
            times = self.watch.times_sum()
            for key in self.watch.keys():
                logger.info(
                    "Average %-9s time: %.2e s (wall), %.2e s (cpu)",
                    key,
                    times[key].wall / self.num_events,
                    times[key].cpu / self.num_events,
                )

        return file_names
