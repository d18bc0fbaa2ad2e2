"""Module with data classes which represent jets and their flavour truth."""

from dataclasses import dataclass

import numpy as np

from genvtx.utils.globals import FLAV_LABELS, INVAL_ID

from .base import DataBase

__all__ = ["Jet", "GenJetFlavourInfo", "RecoJet"]


@dataclass(eq=False)
class Jet(DataBase):
    """Reconstructed jet kinematics.

    Attributes
    ----------
    id : int
        Index of the jet in the event jet list
    pt : float
        Transverse momentum
    eta : float
        Pseudorapidity
    phi : float
        Azimuthal angle
    mass : float
        Jet invariant mass
    """

    id: int = INVAL_ID
    pt: float = -1.0
    eta: float = 0.0
    phi: float = 0.0
    mass: float = 0.0

    # Index attributes
    _index_attrs = ("id",)


@dataclass(eq=False)
class GenJetFlavourInfo(Jet):
    """Generator-level jet with its flavour information.

    Attributes
    ----------
    hadron_flavour : int
        Hadron-based flavour of the jet (5 for b, 4 for c, 0 otherwise)
    parton_flavour : int
        Signed PDG code of the parton which defines the jet flavour
    """

    hadron_flavour: int = INVAL_ID
    parton_flavour: int = 0


@dataclass(eq=False)
class RecoJet(Jet):
    """Selected reconstructed jet, with flavour truth copied from the closest
    generator-level jet (if any lies within the matching cone).

    Attributes
    ----------
    hadron_flavour : int
        Hadron flavour of the matched generator jet (-1 if not matched)
    parton_flavour : int
        Parton flavour of the matched generator jet (0 if not matched)
    gen_id : int
        Index of the matched generator jet (-1 if not matched)
    gen_delta_r : float
        Angular distance to the closest generator jet
    is_gen_matched : bool
        Whether a generator jet lies within the matching cone
    """

    hadron_flavour: int = INVAL_ID
    parton_flavour: int = 0
    gen_id: int = INVAL_ID
    gen_delta_r: float = np.inf
    is_gen_matched: bool = False

    # Boolean attributes
    _bool_attrs = ("is_gen_matched",)

    # Index attributes
    _index_attrs = ("id", "gen_id")

    @property
    def flavour_label(self):
        """Human-readable hadron flavour of the jet."""
        return FLAV_LABELS.get(self.hadron_flavour, FLAV_LABELS[-1])
