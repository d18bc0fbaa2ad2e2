"""Classes in charge of selecting reconstructed jets and matching them to
generator-level jets."""

import numpy as np

from genvtx.data import RecoJet
from genvtx.math.angular import delta_r_matrix
from genvtx.utils.globals import INVAL_ID
from genvtx.utils.logger import logger

from .base import BuilderBase
from .errors import InputValidationError

__all__ = ["RecoJetBuilder"]


class RecoJetBuilder(BuilderBase):
    """Selects reconstructed jets and copies the flavour of the closest
    generator-level jet onto them.

    Typical configuration should look like:

    .. code-block:: yaml

        build:
          jet:
            abs_eta_max: 2.5
            jet_pt_min: 20.0
            jet_pt_max: 1000.0
            dr_cut: 0.4
    """

    # Builder name
    name = "jet"

    # Necessary/optional data products to build the collections
    _build_keys = (("jets", True), ("gen_jets_flavour_info", False))

    # Names of the accessors which expose the derived collections
    _products = ("reco_jets", "reco_jets_gen_match")

    def __init__(self, abs_eta_max, jet_pt_min, jet_pt_max, dr_cut):
        """Initializes the jet builder.

        Parameters
        ----------
        abs_eta_max : float
            Maximum absolute pseudorapidity of a selected jet
        jet_pt_min : float
            Transverse momentum above which a jet is selected
        jet_pt_max : float
            Transverse momentum below which a jet is selected
        dr_cut : float
            Angular distance below which a generator jet is matched
        """
        self.abs_eta_max = self.check_cut("abs_eta_max", abs_eta_max)
        self.jet_pt_max = self.check_cut("jet_pt_max", jet_pt_max)
        self.dr_cut = self.check_cut("dr_cut", dr_cut)

        # A null minimum transverse momentum is allowed
        self.jet_pt_min = self.check_cut("jet_pt_min", jet_pt_min, allow_zero=True)
        if self.jet_pt_min >= self.jet_pt_max:
            raise InputValidationError(
                f"The `jet_pt_min` parameter ({jet_pt_min}) must be smaller "
                f"than `jet_pt_max` ({jet_pt_max})."
            )

        self.reset()

    def reset(self):
        """Clears the collections built for the previous event."""
        self._jets = []

    @property
    def reco_jets(self):
        """List of selected jets."""
        return list(self._jets)

    @property
    def reco_jets_gen_match(self):
        """List of selected jets matched to a generator jet."""
        return [j for j in self._jets if j.is_gen_matched]

    def good_jet(self, jet):
        """Checks whether a jet passes the kinematic selection.

        Parameters
        ----------
        jet : Jet
            Reconstructed jet

        Returns
        -------
        bool
            `True` if the jet is selected
        """
        return (
            abs(jet.eta) < self.abs_eta_max
            and self.jet_pt_min < jet.pt < self.jet_pt_max
        )

    def build(self, jets, gen_jets_flavour_info=None):
        """Builds the jet collections of one event.

        Parameters
        ----------
        jets : List[Jet]
            Reconstructed jets of the event
        gen_jets_flavour_info : List[GenJetFlavourInfo], optional
            Generator jets of the event with their flavour information
        """
        # Clear the previous event
        self.reset()

        # Apply the kinematic selection
        selected = [j for j in jets if self.good_jet(j)]
        if not selected:
            return

        # Compute the angular distance to every generator jet
        gen_jets = gen_jets_flavour_info if gen_jets_flavour_info is not None else []
        if len(gen_jets):
            dists = delta_r_matrix(
                np.array([j.eta for j in selected], dtype=np.float64),
                np.array([j.phi for j in selected], dtype=np.float64),
                np.array([g.eta for g in gen_jets], dtype=np.float64),
                np.array([g.phi for g in gen_jets], dtype=np.float64),
            )

        for i, jet in enumerate(selected):
            kwargs = {}
            if len(gen_jets):
                idx = int(np.argmin(dists[i]))
                kwargs["gen_delta_r"] = float(dists[i, idx])
                if dists[i, idx] < self.dr_cut:
                    gen_jet = gen_jets[idx]
                    kwargs["hadron_flavour"] = gen_jet.hadron_flavour
                    kwargs["parton_flavour"] = gen_jet.parton_flavour
                    kwargs["gen_id"] = idx if gen_jet.id == INVAL_ID else gen_jet.id
                    kwargs["is_gen_matched"] = True

            self._jets.append(
                RecoJet(
                    id=i,
                    pt=jet.pt,
                    eta=jet.eta,
                    phi=jet.phi,
                    mass=jet.mass,
                    **kwargs,
                )
            )

        logger.debug(
            "Selected %d out of %d jets (%d matched to a generator jet).",
            len(self._jets),
            len(jets),
            len(self.reco_jets_gen_match),
        )
