"""Analysis script used to store basic event information into CSV files."""

from genvtx.ana.base import AnaBase

__all__ = ["EventAna"]


class EventAna(AnaBase):
    """Class which saves the size of every derived collection, one row per
    event."""

    # Name of the analysis script (as specified in the configuration)
    name = "event"

    # Set of data keys needed for this analysis script to operate
    _keys = (
        ("gen_particles", False),
        ("sim_tracks", False),
        ("primary_vertices", False),
        ("gen_vertices", True),
        ("gen_vertices_sim_match", True),
        ("gen_vertices_no_nu", True),
        ("gen_vertices_no_nu_sim_match", True),
        ("reco_jets", False),
        ("reco_jets_gen_match", False),
    )

    def __init__(self, **kwargs):
        """Initialize the CSV event logging class.

        Parameters
        ----------
        **kwargs : dict, optional
            Parameters to pass to :class:`AnaBase`
        """
        # Initialize the parent class
        super().__init__(**kwargs)

        # Initialize the output log file
        self.initialize_writer("events")

    def process(self, data, hists):
        """Store basic event information for one entry.

        Parameters
        ----------
        data : dict
            Dictionary of data products containing the derived collections
        hists : HistogramCollection
            Histograms filled across events (unused)
        """
        counts = {}
        for key, _ in self._keys:
            # The event index is stored in every row already
            if key != "index" and key in data:
                counts[f"num_{key}"] = len(data[key])

        self.append("events", **counts)
