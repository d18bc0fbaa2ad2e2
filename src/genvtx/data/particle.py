"""Module with data classes which represent the truth inputs of one event.

This covers the generator-level particles, the simulated tracks produced by
the detector simulation from these particles and the reconstructed primary
vertices of the event.
"""

from dataclasses import dataclass

import numpy as np

from genvtx.utils.globals import FINAL_STATE_STATUS, INVAL_ID, NU_PDGS

from .base import PosDataBase

__all__ = ["GenParticle", "SimTrack", "PrimaryVertex"]


class KinematicsMixin:
    """Kinematic quantities derived from a (px, py, pz, E) 4-momentum."""

    @property
    def p(self):
        """Magnitude of the 3-momentum."""
        return np.linalg.norm(self.momentum[:3])

    @property
    def pt(self):
        """Transverse momentum."""
        return np.hypot(self.momentum[0], self.momentum[1])

    @property
    def energy(self):
        """Energy component of the 4-momentum."""
        return self.momentum[3]

    @property
    def mass(self):
        """Invariant mass (clipped at 0 to absorb rounding errors)."""
        return np.sqrt(max(0.0, self.energy**2 - self.p**2))

    @property
    def phi(self):
        """Azimuthal angle of the 3-momentum, in [-pi, pi]."""
        return np.arctan2(self.momentum[1], self.momentum[0])

    @property
    def eta(self):
        """Pseudorapidity of the 3-momentum.

        Particles travelling along the beam axis get an infinite pseudorapidity
        with the sign of their longitudinal momentum.
        """
        pt, pz = self.pt, self.momentum[2]
        if pt == 0.0:
            return np.copysign(np.inf, pz) if pz != 0.0 else 0.0

        return np.arcsinh(pz / pt)


@dataclass(eq=False)
class GenParticle(KinematicsMixin, PosDataBase):
    """Generator-level (truth) particle information.

    Attributes
    ----------
    id : int
        Identifier of the particle in the event, referenced by `parent_id`
    pdg_id : int
        Particle PDG code
    status : int
        Generator status code
    parent_id : int
        Identifier of the parent particle (-1 if the particle has no parent)
    position : np.ndarray
        (3) Production point of the particle
    end_position : np.ndarray
        (3) Decay point of the particle (-inf if it does not decay)
    momentum : np.ndarray
        (4) Four-momentum (px, py, pz, E) at the production point
    units : str
        Units in which the position attributes are expressed
    """

    id: int = INVAL_ID
    pdg_id: int = 0
    status: int = -1
    parent_id: int = INVAL_ID
    position: np.ndarray = None
    end_position: np.ndarray = None
    momentum: np.ndarray = None
    units: str = "cm"

    # Fixed-length attributes
    _fixed_length_attrs = (("position", 3), ("end_position", 3), ("momentum", 4))

    # Attributes specifying coordinates
    _pos_attrs = ("position", "end_position")

    # Attributes specifying vector components
    _vec_attrs = ("momentum",)

    # Index attributes
    _index_attrs = ("id", "parent_id")

    @property
    def has_parent(self):
        """Whether the particle declares a parent (validity not checked)."""
        return self.parent_id > INVAL_ID

    @property
    def is_neutrino(self):
        """Whether the particle is a neutrino of any flavour."""
        return abs(self.pdg_id) in NU_PDGS

    @property
    def is_final_state(self):
        """Whether the particle is stable at the generator level."""
        return self.status == FINAL_STATE_STATUS


@dataclass(eq=False)
class SimTrack(KinematicsMixin, PosDataBase):
    """Detector simulation track information.

    Attributes
    ----------
    id : int
        Simulation track ID
    pdg_id : int
        PDG code of the simulated particle
    gen_id : int
        Identifier of the generator particle this track simulates (-1 if
        the track does not originate from a generator particle)
    position : np.ndarray
        (3) Origin of the track
    momentum : np.ndarray
        (4) Four-momentum (px, py, pz, E) at the origin
    units : str
        Units in which the position attributes are expressed
    """

    id: int = INVAL_ID
    pdg_id: int = 0
    gen_id: int = INVAL_ID
    position: np.ndarray = None
    momentum: np.ndarray = None
    units: str = "cm"

    # Fixed-length attributes
    _fixed_length_attrs = (("position", 3), ("momentum", 4))

    # Attributes specifying coordinates
    _pos_attrs = ("position",)

    # Attributes specifying vector components
    _vec_attrs = ("momentum",)

    # Index attributes
    _index_attrs = ("id", "gen_id")

    @property
    def is_gen_matched(self):
        """Whether the track points back to a generator particle."""
        return self.gen_id > INVAL_ID


@dataclass(eq=False)
class PrimaryVertex(PosDataBase):
    """Reconstructed primary vertex information.

    Attributes
    ----------
    position : np.ndarray
        (3) Position of the vertex
    is_valid : bool
        Whether the vertex fit converged
    is_fake : bool
        Whether the vertex is the beam-spot fallback
    num_tracks : int
        Number of tracks used in the vertex fit
    units : str
        Units in which the position attributes are expressed
    """

    position: np.ndarray = None
    is_valid: bool = True
    is_fake: bool = False
    num_tracks: int = -1
    units: str = "cm"

    # Fixed-length attributes
    _fixed_length_attrs = (("position", 3),)

    # Attributes specifying coordinates
    _pos_attrs = ("position",)

    # Boolean attributes
    _bool_attrs = ("is_valid", "is_fake")
