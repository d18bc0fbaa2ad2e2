"""Analysis script used to store generator vertex attributes into CSV files."""

from genvtx.ana.base import AnaBase

__all__ = ["VertexTreeAna"]


class VertexTreeAna(AnaBase):
    """Class which saves the attributes of every generator vertex, one row
    per vertex."""

    # Name of the analysis script (as specified in the configuration)
    name = "vertex_tree"

    # Set of data keys needed for this analysis script to operate
    _keys = (("gen_vertices", True),)

    def __init__(self, attrs=None, **kwargs):
        """Initialize the CSV vertex logging class.

        Parameters
        ----------
        attrs : List[str], optional
            Vertex attributes to store. If not specified, stores them all
        **kwargs : dict, optional
            Parameters to pass to :class:`AnaBase`
        """
        # Initialize the parent class
        super().__init__(**kwargs)

        # Store the attributes to save
        self.attrs = attrs

        # Initialize the output log file
        self.initialize_writer("vertices")

    def process(self, data, hists):
        """Store the generator vertex attributes for one entry.

        Parameters
        ----------
        data : dict
            Dictionary of data products containing the generator vertices
        hists : HistogramCollection
            Histograms filled across events (unused)
        """
        for vertex in data["gen_vertices"]:
            self.append("vertices", **vertex.scalar_dict(self.attrs))
