"""Classes in charge of constructing generator-level vertex collections.

A generator vertex is the point at which one (or more) generator particles
decay. It is inferred from the production point of the particles which have
a parent: all the particles produced within a small distance of each other
form one vertex. Each vertex is then linked to the vertex at which its
incoming particle was produced, matched to the simulated track origins and
flagged when it only produces neutrinos.
"""

import numpy as np

from genvtx.data import GenVertex
from genvtx.math.distance import cdist, euclidean
from genvtx.math.graph import radius_components
from genvtx.utils.globals import INVAL_ID
from genvtx.utils.logger import logger

from .base import BuilderBase
from .errors import InputValidationError, MissingPrimaryVertexError

__all__ = ["GenVertexBuilder"]


class GenVertexBuilder(BuilderBase):
    """Builds generator vertices and their derived collections.

    The builder exposes one canonical list of :class:`GenVertex` objects and
    four views of it:
    - `gen_vertices`: all the vertices
    - `gen_vertices_sim_match`: vertices with a simulated track nearby
    - `gen_vertices_no_nu`: vertices which do not only produce neutrinos
    - `gen_vertices_no_nu_sim_match`: intersection of the two previous views

    Typical configuration should look like:

    .. code-block:: yaml

        build:
          vertex:
            pos_tolerance: 1.0e-4
            sim_match_dist: 0.05
    """

    # Builder name
    name = "vertex"

    # Necessary/optional data products to build the collections
    _build_keys = (
        ("gen_particles", True),
        ("sim_tracks", False),
        ("primary_vertex", True),
    )

    # Names of the accessors which expose the derived collections
    _products = (
        "gen_vertices",
        "gen_vertices_sim_match",
        "gen_vertices_no_nu",
        "gen_vertices_no_nu_sim_match",
    )

    def __init__(self, pos_tolerance, sim_match_dist):
        """Initializes the vertex builder.

        Parameters
        ----------
        pos_tolerance : float
            Distance below which two production points are considered to be
            the same vertex
        sim_match_dist : float
            Distance below which a simulated track origin is matched to a
            vertex
        """
        self.pos_tolerance = self.check_cut("pos_tolerance", pos_tolerance)
        self.sim_match_dist = self.check_cut("sim_match_dist", sim_match_dist)

        self.reset()

    def reset(self):
        """Clears the collections built for the previous event."""
        self._vertices = []

    @property
    def gen_vertices(self):
        """List of all generator vertices."""
        return list(self._vertices)

    @property
    def gen_vertices_sim_match(self):
        """List of generator vertices matched to a simulated track."""
        return [v for v in self._vertices if v.is_sim_matched]

    @property
    def gen_vertices_no_nu(self):
        """List of generator vertices which do not only produce neutrinos."""
        return [v for v in self._vertices if not v.is_neutrino_only]

    @property
    def gen_vertices_no_nu_sim_match(self):
        """List of sim-matched generator vertices which do not only produce
        neutrinos."""
        return [
            v for v in self._vertices if v.is_sim_matched and not v.is_neutrino_only
        ]

    def build(self, gen_particles, sim_tracks=None, primary_vertex=None):
        """Builds the generator vertices of one event.

        Parameters
        ----------
        gen_particles : List[GenParticle]
            (P) Generator particles of the event
        sim_tracks : List[SimTrack], optional
            (T) Simulated tracks of the event
        primary_vertex : Union[PrimaryVertex, np.ndarray]
            Primary vertex of the event (or simply its position)
        """
        # Clear the previous event
        self.reset()

        # Check on the inputs
        pv_position = self.get_primary_position(primary_vertex)
        particles = self.index_particles(gen_particles)
        tracks = self.sort_tracks(sim_tracks)

        # Only the particles with a valid parent point to a vertex
        daughters = [
            p for p in particles.values() if self.has_valid_parent(p, particles)
        ]
        if len(daughters) < len(particles):
            num_dangling = sum(
                p.has_parent and not self.has_valid_parent(p, particles)
                for p in particles.values()
            )
            if num_dangling:
                logger.warning(
                    "Found %d particle(s) with an invalid parent reference, "
                    "they are attached to the primary vertex.",
                    num_dangling,
                )

        if not daughters:
            return

        # Group the production points into vertices
        points = np.vstack([p.position for p in daughters])
        labels = self.cluster_points(points)
        groups = self.make_groups(daughters, labels, particles)

        # Link each vertex to its parent vertex, splice out neutrino-only ones
        vertex_of = {
            int(d): k for k, group in enumerate(groups) for d in group["daughter_ids"]
        }
        parents = np.array(
            [
                self.find_parent(k, group["mother_id"], particles, vertex_of)
                for k, group in enumerate(groups)
            ],
            dtype=np.int64,
        )
        self.break_cycles(parents)

        nu_only = np.array(
            [all(particles[d].is_neutrino for d in g["daughter_ids"]) for g in groups],
            dtype=bool,
        )
        parents_no_nu = self.splice_parents(parents, nu_only)

        # Match the vertices with the simulated track origins
        vertex_points = np.vstack([g["position"] for g in groups])
        matches = self.match_sim_tracks(vertex_points, tracks)

        # Build the vertex objects
        for k, group in enumerate(groups):
            num_match, track_idx, dist = matches[k]
            self._vertices.append(
                GenVertex(
                    id=k,
                    mother_id=group["mother_id"],
                    mother_pdg_id=particles[group["mother_id"]].pdg_id,
                    mother_ids=group["mother_ids"],
                    daughter_ids=group["daughter_ids"],
                    parent_id=int(parents[k]),
                    parent_id_no_nu=int(parents_no_nu[k]),
                    is_neutrino_only=bool(nu_only[k]),
                    is_sim_matched=num_match > 0,
                    num_sim_tracks=num_match,
                    sim_track_id=tracks[track_idx].id if num_match else INVAL_ID,
                    sim_gen_id=tracks[track_idx].gen_id if num_match else INVAL_ID,
                    sim_distance=dist,
                    pv_distance=euclidean(group["position"], pv_position),
                    position=group["position"],
                    units=daughters[0].units,
                )
            )

        logger.debug(
            "Built %d generator vertices (%d sim-matched, %d without neutrinos, "
            "%d without neutrinos and sim-matched).",
            len(self._vertices),
            len(self.gen_vertices_sim_match),
            len(self.gen_vertices_no_nu),
            len(self.gen_vertices_no_nu_sim_match),
        )

    @staticmethod
    def get_primary_position(primary_vertex):
        """Fetches and checks the position of the primary vertex.

        Parameters
        ----------
        primary_vertex : Union[PrimaryVertex, np.ndarray]
            Primary vertex of the event (or simply its position)

        Returns
        -------
        np.ndarray
            (3) Primary vertex position
        """
        if primary_vertex is None:
            raise MissingPrimaryVertexError(
                "Cannot build generator vertices without a primary vertex."
            )

        position = getattr(primary_vertex, "position", primary_vertex)
        position = np.asarray(position, dtype=np.float64)
        if position.shape != (3,) or not np.all(np.isfinite(position)):
            raise InputValidationError(
                "The primary vertex position must be a finite 3-vector, "
                f"got {position}."
            )

        return position

    @staticmethod
    def index_particles(gen_particles):
        """Checks the generator particles and maps their IDs onto them.

        Parameters
        ----------
        gen_particles : List[GenParticle]
            (P) Generator particles of the event

        Returns
        -------
        Dict[int, GenParticle]
            Particles, ordered by increasing ID
        """
        particles = {}
        for part in sorted(gen_particles, key=lambda p: p.id):
            if part.id in particles:
                raise InputValidationError(
                    f"Found more than one generator particle with ID {part.id}."
                )
            if part.nonfinite_attrs(["position"]) or np.isnan(part.end_position).any():
                raise InputValidationError(
                    f"Generator particle {part.id} (PDG {part.pdg_id}) has a "
                    f"non-finite position: {part.position}, {part.end_position}."
                )

            particles[part.id] = part

        return particles

    @staticmethod
    def sort_tracks(sim_tracks):
        """Checks the simulated tracks and orders them by increasing ID.

        Parameters
        ----------
        sim_tracks : List[SimTrack]
            (T) Simulated tracks of the event

        Returns
        -------
        List[SimTrack]
            Ordered simulated tracks
        """
        if sim_tracks is None:
            sim_tracks = []

        tracks = sorted(sim_tracks, key=lambda t: t.id)
        for track in tracks:
            if track.nonfinite_attrs():
                raise InputValidationError(
                    f"Simulated track {track.id} has a non-finite origin: "
                    f"{track.position}."
                )

        return tracks

    @staticmethod
    def has_valid_parent(particle, particles):
        """Checks whether the parent reference of a particle is usable.

        Parameters
        ----------
        particle : GenParticle
            Generator particle
        particles : Dict[int, GenParticle]
            All the particles of the event, indexed by ID

        Returns
        -------
        bool
            `True` if the parent exists in the event and is not the particle
        """
        return (
            particle.has_parent
            and particle.parent_id != particle.id
            and particle.parent_id in particles
        )

    def cluster_points(self, points):
        """Groups production points which are closer than the tolerance.

        Every pair of points within tolerance is linked (single linkage) and
        each connected component forms a group. Two points of different groups
        are never within tolerance of each other, so no two group
        representatives (first point of each group) can be merged further.

        Parameters
        ----------
        points : np.ndarray
            (N, 3) Production points, ordered by increasing particle ID

        Returns
        -------
        np.ndarray
            (N) Group label of each point, ordered by first appearance
        """
        return radius_components(points, self.pos_tolerance)

    @staticmethod
    def make_groups(daughters, labels, particles):
        """Summarizes each group of daughters, sorts groups canonically.

        Parameters
        ----------
        daughters : List[GenParticle]
            (N) Particles with a valid parent, ordered by increasing ID
        labels : np.ndarray
            (N) Group label of each daughter
        particles : Dict[int, GenParticle]
            All the particles of the event, indexed by ID

        Returns
        -------
        List[dict]
            One dictionary per vertex, ordered by (mother ID, position)
        """
        groups = []
        for label in range(labels.max() + 1):
            members = np.where(labels == label)[0]
            daughter_ids = np.array([daughters[i].id for i in members], dtype=np.int64)
            mother_ids = np.unique(
                [particles[d].parent_id for d in daughter_ids]
            ).astype(np.int64)
            groups.append(
                {
                    "mother_id": int(mother_ids[0]),
                    "mother_ids": mother_ids,
                    "daughter_ids": daughter_ids,
                    "position": daughters[members[0]].position.copy(),
                }
            )

        groups.sort(key=lambda g: (g["mother_id"], *g["position"]))

        return groups

    @staticmethod
    def find_parent(index, mother_id, particles, vertex_of):
        """Finds the vertex at which the incoming particle was produced.

        Walks up the ancestry of the incoming particle until a particle
        produced at a different vertex is found. If the chain ends, the vertex
        is attached to the primary vertex.

        Parameters
        ----------
        index : int
            Index of the vertex to find the parent of
        mother_id : int
            ID of the incoming particle of the vertex
        particles : Dict[int, GenParticle]
            All the particles of the event, indexed by ID
        vertex_of : Dict[int, int]
            Maps the ID of each particle with a valid parent onto the index
            of the vertex at which it is produced

        Returns
        -------
        int
            Index of the parent vertex (-1 if attached to the primary vertex)
        """
        current, visited = mother_id, set()
        while current in vertex_of and current not in visited:
            if vertex_of[current] != index:
                return vertex_of[current]

            # The particle is produced where it decays, keep walking
            visited.add(current)
            current = particles[current].parent_id

        return INVAL_ID

    @staticmethod
    def break_cycles(parents):
        """Attaches to the primary vertex any vertex which closes an ancestry
        cycle, in place.

        Cycles are only possible with inconsistent parent references in the
        input (e.g. two particles declaring each other as parent).

        Parameters
        ----------
        parents : np.ndarray
            (V) Index of the parent of each vertex
        """
        # 0: not visited, 1: on the current path, 2: done
        state = np.zeros(len(parents), dtype=np.int64)
        for start in range(len(parents)):
            path, current = [], start
            while current > INVAL_ID and state[current] == 0:
                state[current] = 1
                path.append(current)
                current = parents[current]

            if current > INVAL_ID and state[current] == 1:
                logger.warning(
                    "Vertex %d closes an ancestry cycle, it is attached to the "
                    "primary vertex instead of vertex %d.",
                    path[-1],
                    current,
                )
                parents[path[-1]] = INVAL_ID

            if path:
                state[path] = 2

    @staticmethod
    def splice_parents(parents, nu_only):
        """Finds the closest ancestor of each vertex which is not neutrino-only.

        Parameters
        ----------
        parents : np.ndarray
            (V) Index of the parent of each vertex (acyclic)
        nu_only : np.ndarray
            (V) Whether each vertex only produces neutrinos

        Returns
        -------
        np.ndarray
            (V) Index of the closest ancestor which is not neutrino-only
        """
        spliced = parents.copy()
        for k in range(len(parents)):
            while spliced[k] > INVAL_ID and nu_only[spliced[k]]:
                spliced[k] = parents[spliced[k]]

        return spliced

    def match_sim_tracks(self, vertex_points, tracks):
        """Matches each vertex with the simulated track origins around it.

        Parameters
        ----------
        vertex_points : np.ndarray
            (V, 3) Vertex positions
        tracks : List[SimTrack]
            (T) Simulated tracks, ordered by increasing ID

        Returns
        -------
        List[Tuple[int, int, float]]
            For each vertex, the number of tracks within the matching distance,
            the index of the closest track and the distance to it
        """
        if not tracks:
            return [(0, INVAL_ID, np.inf)] * len(vertex_points)

        track_points = np.vstack([t.position for t in tracks])
        dists = cdist(vertex_points, track_points)
        matches = []
        for k in range(len(vertex_points)):
            # The first closest track wins ties (lowest ID)
            idx = int(np.argmin(dists[k]))
            num_match = int(np.sum(dists[k] < self.sim_match_dist))
            matches.append((num_match, idx, float(dists[k, idx])))

        return matches
