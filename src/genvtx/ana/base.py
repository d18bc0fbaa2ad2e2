"""Base class of all analysis scripts."""

from abc import ABC, abstractmethod

from genvtx.io.write import CSVWriter


class AnaBase(ABC):
    """Parent class of all analysis scripts.

    This base class performs the following functions:
    - Ensures that the necessary methods exist
    - Checks that the script is provided the necessary information
    - Writes the output of the analysis to CSV

    Attributes
    ----------
    name : str
        Name of the analysis script (to call it from a configuration file)
    keys : Dict[str, bool]
        Data products needed (True) or optional (False) to run the script
    """

    # Name of the analysis script (as specified in the configuration)
    name = None

    # Alternative allowed names of the analysis script
    aliases = ()

    # Set of data keys needed for this analysis script to operate
    _keys = ()

    def __init__(self, append=False, overwrite=False, log_dir=None, prefix=None):
        """Initialize default analysis script object properties.

        Parameters
        ----------
        append : bool, default False
            If True, appends existing CSV files instead of creating new ones
        overwrite : bool, default False
            If True and an output CSV file exists, overwrite it
        log_dir : str, optional
            Output CSV file directory (shared with driver log)
        prefix : str, optional
            Name to prefix every output CSV file with
        """
        # Initialize default keys
        self.update_keys({"index": True})

        # Store the file flags
        self.append_file = append
        self.overwrite_file = overwrite

        # Initialize a writer dictionary to be filled by the children classes
        self.log_dir = log_dir
        self.output_prefix = prefix
        self.writers = {}
        self.base_dict = {}

    def initialize_writer(self, name):
        """Adds a CSV writer to the list of writers for this script.

        Parameters
        ----------
        name : str
            Name of the writer
        """
        # Define the name of the file to write to
        assert len(name) > 0, "Must provide a non-empty name."
        file_name = f"{self.name}_{name}.csv"
        if self.output_prefix:
            file_name = f"{self.output_prefix}_{file_name}"
        if self.log_dir:
            file_name = f"{self.log_dir}/{file_name}"

        # Initialize the writer
        self.writers[name] = CSVWriter(
            file_name, append=self.append_file, overwrite=self.overwrite_file
        )

    @property
    def keys(self):
        """Dictionary of (key, necessity) pairs which determine which data keys
        are needed/optional for the analysis script to run.

        Returns
        -------
        Dict[str, bool]
            Dictionary of (key, necessity) pairs to be used
        """
        return dict(self._keys)

    def update_keys(self, update_dict):
        """Update the underlying set of keys and their necessity in place.

        Parameters
        ----------
        update_dict : Dict[str, bool]
            Dictionary of (key, necessity) pairs to update the keys with
        """
        if len(update_dict) > 0:
            keys = self.keys
            keys.update(update_dict)
            self._keys = tuple(keys.items())

    def append(self, name, **kwargs):
        """Append a CSV log file with a set of values.

        Parameters
        ----------
        name : str
            Name of the writer
        **kwargs : dict
            Dictionary of information to save to the writer
        """
        self.writers[name].append({**self.base_dict, **kwargs})

    def __call__(self, data, hists):
        """Runs the analysis script on one event.

        Parameters
        ----------
        data : dict
            Data dictionary for one event
        hists : HistogramCollection
            Histograms filled across events

        Returns
        -------
        dict
            Update to the input dictionary
        """
        # Fetch the necessary information
        data_filter = {}
        for key, req in self.keys.items():
            # If this key is needed, check that it exists
            if req and key not in data:
                raise KeyError(
                    f"Analysis script `{self.name}` is missing an essential "
                    f"input to be used: `{key}`."
                )

            if key in data:
                data_filter[key] = data[key]

        # Fetch the base dictionary
        self.base_dict = {"index": data_filter["index"]}

        # Run the analysis script
        return self.process(data_filter, hists)

    @abstractmethod
    def process(self, data, hists):
        """Place-holder method to be defined in each analysis script.

        Parameters
        ----------
        data : dict
            Filtered data dictionary for one event
        hists : HistogramCollection
            Histograms filled across events
        """
        raise NotImplementedError("Must define the `process` function")
