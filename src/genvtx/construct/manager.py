"""Class to build all the derived event collections."""

from collections import OrderedDict

from genvtx.utils.logger import logger

from .errors import MissingPrimaryVertexError
from .jet import RecoJetBuilder
from .vertex import GenVertexBuilder


class BuildManager:
    """Manager which constructs the derived collections of one event.

    Takes the records of one event (generator particles, simulated tracks,
    primary vertices and jets), selects the primary vertex of the event and
    runs each configured builder on them.
    """

    # Name of input data products needed to build the collections. These
    # names are not set in stone; they can be set in the configuration
    _sources = (
        ("gen_particles", ("gen_particles", "genParticles")),
        ("sim_tracks", ("sim_tracks", "simTracks")),
        ("primary_vertices", ("primary_vertices", "primaryVertices")),
        ("jets", ("jets",)),
        ("gen_jets_flavour_info", ("gen_jets_flavour_info", "genJetsFlavourInfo")),
    )

    def __init__(self, vertex=None, jet=None, sources=None):
        """Initializes the build manager.

        Parameters
        ----------
        vertex : dict, optional
            Configuration of the generator vertex builder
        jet : dict, optional
            Configuration of the reconstructed jet builder
        sources : Dict[str, str], optional
            Dictionary which maps the necessary data products onto a name
            in the event dictionary
        """
        # If custom sources are provided, update the tuple
        if sources is not None:
            sources_dict = dict(self._sources)
            for key, value in sources.items():
                assert key in sources_dict, (
                    "Unexpected data product specified in `sources`: "
                    f"{key}. Should be one of {list(sources_dict.keys())}."
                )
                if isinstance(value, str):
                    sources_dict[key] = (value,)
                else:
                    sources_dict[key] = tuple(value)

            self._sources = tuple(sources_dict.items())

        # Initialize the builders
        assert (
            vertex is not None or jet is not None
        ), "Must configure at least one of the `vertex` or `jet` builders."

        self.builders = OrderedDict()
        if vertex is not None:
            self.builders["vertex"] = GenVertexBuilder(**vertex)
        if jet is not None:
            self.builders["jet"] = RecoJetBuilder(**jet)

    @property
    def product_keys(self):
        """Names of the derived collections produced by the builders.

        Returns
        -------
        List[str]
            Derived collection names
        """
        return [key for builder in self.builders.values() for key in builder._products]

    def __call__(self, data):
        """Build the derived collections for one event.

        Parameters
        ----------
        data : dict
            Dictionary of event records

        Notes
        -----
        Modifies the data dictionary in place.
        """
        # Fetch the input data products under their canonical names
        sources = self.fetch_sources(data)
        data.update(**sources)

        # Select the primary vertex before building anything
        if "vertex" in self.builders:
            data["primary_vertex"] = self.select_primary(data)

        # Loop over builders
        for builder in self.builders.values():
            data.update(**builder(data))

    def fetch_sources(self, data):
        """Fetches the input data products under their canonical names.

        Parameters
        ----------
        data : dict
            Dictionary of event records

        Returns
        -------
        dict
            Data products found in the event, under their canonical names
        """
        sources = {}
        for key, alt_keys in self._sources:
            for alt in alt_keys:
                if alt in data:
                    sources[key] = data[alt]
                    break

        return sources

    @staticmethod
    def select_primary(data):
        """Selects the primary vertex of the event.

        The first primary vertex is the one which is most likely to be the
        signal vertex.

        Parameters
        ----------
        data : dict
            Dictionary of event records

        Returns
        -------
        PrimaryVertex
            Primary vertex of the event
        """
        primaries = data.get("primary_vertices", None)
        if primaries is None or len(primaries) == 0:
            raise MissingPrimaryVertexError(
                f"Event {data.get('index', '?')} has no primary vertex, cannot "
                "build the generator vertex collections."
            )

        if len(primaries) > 1:
            logger.debug(
                "Event %s has %d primary vertices, using the first one.",
                data.get("index", "?"),
                len(primaries),
            )

        return primaries[0]
