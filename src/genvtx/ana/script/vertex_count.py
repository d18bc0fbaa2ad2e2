"""Analysis script used to histogram the number of generator vertices."""

from genvtx.ana.base import AnaBase
from genvtx.utils.globals import COUNT_NBINS, COUNT_RANGE

__all__ = ["VertexCountAna"]


class VertexCountAna(AnaBase):
    """Fills one histogram per vertex collection with its size in each event.

    The jet multiplicities are histogrammed too, if the jets are built.
    """

    # Name of the analysis script (as specified in the configuration)
    name = "vertex_count"

    # Set of data keys needed for this analysis script to operate
    _keys = (
        ("gen_vertices", True),
        ("gen_vertices_sim_match", True),
        ("gen_vertices_no_nu", True),
        ("gen_vertices_no_nu_sim_match", True),
        ("reco_jets", False),
        ("reco_jets_gen_match", False),
    )

    # Histogram name, source collection and title of each count histogram
    _hists = (
        ("nGV", "gen_vertices", "Number of generator vertices"),
        ("nGVs", "gen_vertices_sim_match", "Number of sim-matched vertices"),
        ("nGVn", "gen_vertices_no_nu", "Number of vertices without neutrinos"),
        (
            "nGVns",
            "gen_vertices_no_nu_sim_match",
            "Number of sim-matched generator vertices without neutrinos",
        ),
        ("nRJ", "reco_jets", "Number of selected jets"),
        ("nRJm", "reco_jets_gen_match", "Number of gen-matched selected jets"),
    )

    def __init__(
        self, nbins=COUNT_NBINS, low=COUNT_RANGE[0], high=COUNT_RANGE[1], **kwargs
    ):
        """Initialize the count histogram binning.

        Parameters
        ----------
        nbins : int, default 10
            Number of bins of the count histograms
        low : float, default 0.
            Lower edge of the count histograms
        high : float, default 10.
            Upper edge of the count histograms
        **kwargs : dict, optional
            Parameters to pass to :class:`AnaBase`
        """
        # Initialize the parent class
        super().__init__(**kwargs)

        # Store the binning
        self.binning = (nbins, low, high)

    def process(self, data, hists):
        """Fill the count histograms for one event.

        Parameters
        ----------
        data : dict
            Dictionary of data products containing the derived collections
        hists : HistogramCollection
            Histograms filled across events
        """
        for name, key, title in self._hists:
            if key in data:
                hists.book(name, *self.binning, title=title)
                hists.fill(name, len(data[key]))
