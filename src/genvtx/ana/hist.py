"""Fixed-binning histograms filled event by event.

The histograms are explicit accumulators: a :class:`HistogramCollection` is
owned by the driver and handed to every analysis script call.
"""

import os
from collections import OrderedDict

import numpy as np
import uproot

from genvtx.io.write import CSVWriter
from genvtx.utils.logger import logger

__all__ = ["Histogram", "HistogramCollection"]


class Histogram:
    """One-dimensional histogram with uniform binning.

    The bins are closed on their lower edge and open on their upper edge. Values
    below the lower edge of the first bin are counted in the underflow, values
    at or above the upper edge of the last bin are counted in the overflow.

    Attributes
    ----------
    name : str
        Name of the histogram
    title : str
        Human-readable description of the histogram content
    edges : np.ndarray
        (B + 1) Bin edges
    counts : np.ndarray
        (B) Weighted content of each bin
    underflow : float
        Weighted content below the histogram range
    overflow : float
        Weighted content above the histogram range
    entries : int
        Number of fill calls
    """

    def __init__(self, name, nbins, low, high, title=""):
        """Initialize the histogram binning.

        Parameters
        ----------
        name : str
            Name of the histogram
        nbins : int
            Number of bins
        low : float
            Lower edge of the first bin
        high : float
            Upper edge of the last bin
        title : str, optional
            Human-readable description of the histogram content
        """
        assert nbins > 0, f"The number of bins must be positive, got {nbins}."
        assert high > low, f"The histogram range is empty: [{low}, {high})."

        self.name = name
        self.title = title
        self.edges = np.linspace(low, high, nbins + 1)
        self.reset()

    def reset(self):
        """Empties the histogram content."""
        self.counts = np.zeros(self.nbins, dtype=np.float64)
        self.underflow = 0.0
        self.overflow = 0.0
        self.entries = 0

    @property
    def nbins(self):
        """Number of bins."""
        return len(self.edges) - 1

    @property
    def low(self):
        """Lower edge of the histogram range."""
        return self.edges[0]

    @property
    def high(self):
        """Upper edge of the histogram range."""
        return self.edges[-1]

    @property
    def binning(self):
        """Binning of the histogram as a (nbins, low, high) tuple."""
        return (self.nbins, float(self.low), float(self.high))

    @property
    def integral(self):
        """Weighted content within the histogram range."""
        return float(np.sum(self.counts))

    def find_bin(self, value):
        """Returns the index of the bin which contains a value.

        Parameters
        ----------
        value : float
            Value to locate

        Returns
        -------
        int
            Bin index, -1 for underflow and `nbins` for overflow
        """
        if value < self.low:
            return -1
        if value >= self.high:
            return self.nbins

        index = int(np.searchsorted(self.edges, value, side="right")) - 1

        return min(index, self.nbins - 1)

    def fill(self, value, weight=1.0):
        """Adds one value to the histogram.

        Parameters
        ----------
        value : float
            Value to add
        weight : float, default 1.0
            Weight of the value
        """
        if np.isnan(value):
            raise ValueError(f"Cannot fill histogram `{self.name}` with NaN.")

        self.entries += 1
        index = self.find_bin(value)
        if index < 0:
            self.underflow += weight
        elif index >= self.nbins:
            self.overflow += weight
        else:
            self.counts[index] += weight

    def rows(self):
        """Tabulates the content of the histogram, one row per bin.

        Returns
        -------
        List[dict]
            List of (bin_low, bin_high, count) dictionaries
        """
        return [
            {
                "bin_low": self.edges[i],
                "bin_high": self.edges[i + 1],
                "count": self.counts[i],
            }
            for i in range(self.nbins)
        ]

    def write(self, file_name, overwrite=False):
        """Writes the content of the histogram to a CSV file.

        Parameters
        ----------
        file_name : str
            Path to the output CSV file
        overwrite : bool, default False
            If True, overwrite the output file if it already exists
        """
        writer = CSVWriter(file_name, overwrite=overwrite)
        writer.extend(self.rows())


class HistogramCollection:
    """Ordered set of named histograms."""

    def __init__(self):
        """Initializes an empty collection."""
        self._hists = OrderedDict()

    def __len__(self):
        return len(self._hists)

    def __contains__(self, name):
        return name in self._hists

    def __getitem__(self, name):
        return self._hists[name]

    def __iter__(self):
        return iter(self._hists.values())

    def keys(self):
        """Names of the histograms in the collection."""
        return self._hists.keys()

    def book(self, name, nbins, low, high, title=""):
        """Adds a histogram to the collection, if it does not exist yet.

        Parameters
        ----------
        name : str
            Name of the histogram
        nbins : int
            Number of bins
        low : float
            Lower edge of the first bin
        high : float
            Upper edge of the last bin
        title : str, optional
            Human-readable description of the histogram content

        Returns
        -------
        Histogram
            Booked histogram
        """
        if name in self._hists:
            hist = self._hists[name]
            if hist.binning != (nbins, float(low), float(high)):
                raise ValueError(
                    f"Histogram `{name}` is already booked with a different "
                    f"binning: {hist.binning}."
                )

            return hist

        self._hists[name] = Histogram(name, nbins, low, high, title)

        return self._hists[name]

    def fill(self, name, value, weight=1.0):
        """Adds one value to a booked histogram.

        Parameters
        ----------
        name : str
            Name of the histogram
        value : float
            Value to add
        weight : float, default 1.0
            Weight of the value
        """
        if name not in self._hists:
            raise KeyError(f"Histogram `{name}` must be booked before being filled.")

        self._hists[name].fill(value, weight)

    def reset(self):
        """Empties all the histograms of the collection."""
        for hist in self._hists.values():
            hist.reset()

    def write(self, log_dir="", prefix=None, overwrite=False):
        """Writes every histogram to its own CSV file.

        Each histogram is stored as `hist_<name>.csv` in the log directory.

        Parameters
        ----------
        log_dir : str, optional
            Output CSV file directory
        prefix : str, optional
            Name to prefix every output CSV file with
        overwrite : bool, default False
            If True, overwrite the output files if they already exist

        Returns
        -------
        List[str]
            Paths to the CSV files written
        """
        file_names = []
        for name, hist in self._hists.items():
            file_name = f"hist_{name}.csv"
            if prefix:
                file_name = f"{prefix}_{file_name}"
            file_name = os.path.join(log_dir, file_name)

            hist.write(file_name, overwrite=overwrite)
            file_names.append(file_name)

            logger.info(
                "%-8s entries: %6d, mean: %8.3f, underflow: %g, overflow: %g",
                name,
                hist.entries,
                self.mean(hist),
                hist.underflow,
                hist.overflow,
            )

        return file_names

    def write_root(self, file_name):
        """Writes every histogram to one ROOT file, one `TH1` per histogram.

        The underflow and overflow are not stored, they are reported in the
        log by :meth:`write`.

        Parameters
        ----------
        file_name : str
            Path to the output ROOT file (overwritten if it exists)
        """
        with uproot.recreate(file_name) as out_file:
            for name, hist in self._hists.items():
                out_file[name] = (hist.counts, hist.edges)

        logger.info("Wrote %d histograms to %s", len(self._hists), file_name)

    @staticmethod
    def mean(hist):
        """Mean of the histogram content, computed from the bin centers.

        Parameters
        ----------
        hist : Histogram
            Histogram to summarize

        Returns
        -------
        float
            Mean value (0 if the histogram is empty)
        """
        if hist.integral == 0.0:
            return 0.0

        centers = 0.5 * (hist.edges[1:] + hist.edges[:-1])

        return float(np.sum(centers * hist.counts) / hist.integral)
