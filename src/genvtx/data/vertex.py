"""Module with a data class object which represents a generator-level vertex."""

from dataclasses import dataclass

import numpy as np

from genvtx.utils.globals import INVAL_ID

from .base import PosDataBase

__all__ = ["GenVertex"]


@dataclass(eq=False)
class GenVertex(PosDataBase):
    """Generator-level vertex, i.e. the decay point of one or more particles.

    Attributes
    ----------
    id : int
        Index of the vertex in the event vertex list
    mother_id : int
        Identifier of the canonical incoming particle (lowest identifier among
        the particles which decay at this point)
    mother_pdg_id : int
        PDG code of the canonical incoming particle
    mother_ids : np.ndarray
        (M) Sorted identifiers of all the particles which decay at this point
    daughter_ids : np.ndarray
        (D) Sorted identifiers of the particles produced at this point
    parent_id : int
        Index of the vertex at which the incoming particle was produced
        (-1 if the vertex is attached to the primary vertex)
    parent_id_no_nu : int
        Index of the closest ancestor vertex which is not neutrino-only
        (-1 if the vertex is attached to the primary vertex)
    is_neutrino_only : bool
        Whether all the daughters of the vertex are neutrinos
    is_sim_matched : bool
        Whether at least one simulated track originates within the
        matching distance of the vertex
    num_sim_tracks : int
        Number of simulated tracks within the matching distance
    sim_track_id : int
        ID of the closest matched simulated track
    sim_gen_id : int
        Generator particle identifier of the closest matched simulated track
    sim_distance : float
        Distance between the vertex and the closest simulated track origin
    pv_distance : float
        Distance between the vertex and the primary vertex
    position : np.ndarray
        (3) Location of the vertex
    units : str
        Units in which the position attributes are expressed
    """

    id: int = INVAL_ID
    mother_id: int = INVAL_ID
    mother_pdg_id: int = 0
    mother_ids: np.ndarray = None
    daughter_ids: np.ndarray = None
    parent_id: int = INVAL_ID
    parent_id_no_nu: int = INVAL_ID
    is_neutrino_only: bool = False
    is_sim_matched: bool = False
    num_sim_tracks: int = 0
    sim_track_id: int = INVAL_ID
    sim_gen_id: int = INVAL_ID
    sim_distance: float = np.inf
    pv_distance: float = -1.0
    position: np.ndarray = None
    units: str = "cm"

    # Fixed-length attributes
    _fixed_length_attrs = (("position", 3),)

    # Variable-length attributes
    _var_length_attrs = (("mother_ids", np.int64), ("daughter_ids", np.int64))

    # Attributes specifying coordinates
    _pos_attrs = ("position",)

    # Boolean attributes
    _bool_attrs = ("is_neutrino_only", "is_sim_matched")

    # Index attributes
    _index_attrs = ("id", "parent_id", "parent_id_no_nu", "sim_track_id")

    def __str__(self):
        """Human-readable string representation of the vertex object.

        Results
        -------
        str
            Basic information about the vertex properties
        """
        pos = ", ".join(f"{v:0.4g}" for v in self.position)
        return (
            f"GenVertex(id={self.id:>3}, mother={self.mother_pdg_id:>6}, "
            f"parent={self.parent_id:>3}, daughters={self.num_daughters}, "
            f"position=({pos}), sim_matched={self.is_sim_matched}, "
            f"neutrino_only={self.is_neutrino_only})"
        )

    @property
    def num_daughters(self):
        """Number of particles produced at this vertex."""
        return len(self.daughter_ids)

    @property
    def is_primary(self):
        """Whether the vertex is attached to the primary vertex."""
        return self.parent_id == INVAL_ID

    @property
    def is_primary_no_nu(self):
        """Whether the vertex is attached to the primary vertex once the
        neutrino-only vertices are spliced out of the ancestry."""
        return self.parent_id_no_nu == INVAL_ID
