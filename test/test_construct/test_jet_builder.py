"""Tests of the reconstructed jet builder."""

import numpy as np
import pytest

from genvtx.construct import InputValidationError, RecoJetBuilder
from genvtx.data import GenJetFlavourInfo, Jet


@pytest.fixture(name="builder")
def fixture_builder():
    """Jet builder with typical selection cuts."""
    return RecoJetBuilder(
        abs_eta_max=2.5, jet_pt_min=20.0, jet_pt_max=1000.0, dr_cut=0.4
    )


class TestRecoJetBuilder:
    """Selection and flavour matching of jets."""

    def test_selection(self, builder):
        """Only jets within the acceptance are kept."""
        jets = [
            Jet(id=0, pt=50.0, eta=0.5, phi=0.0),
            Jet(id=1, pt=10.0, eta=0.5, phi=0.0),
            Jet(id=2, pt=50.0, eta=-2.7, phi=0.0),
            Jet(id=3, pt=1500.0, eta=0.0, phi=0.0),
            Jet(id=4, pt=20.0, eta=0.0, phi=0.0),
            Jet(id=5, pt=30.0, eta=2.4, phi=1.0),
        ]
        builder.build(jets)

        reco_jets = builder.reco_jets
        assert [j.pt for j in reco_jets] == [50.0, 30.0]
        assert [j.id for j in reco_jets] == [0, 1]
        assert builder.reco_jets_gen_match == []
        assert all(j.gen_delta_r == np.inf for j in reco_jets)

    def test_flavour_matching(self, builder):
        """The flavour of the closest generator jet is copied within the cone."""
        jets = [
            Jet(pt=100.0, eta=0.0, phi=0.0),
            Jet(pt=80.0, eta=1.0, phi=2.0),
        ]
        gen_jets = [
            GenJetFlavourInfo(id=0, pt=90.0, eta=1.1, phi=2.1, hadron_flavour=4),
            GenJetFlavourInfo(
                id=1, pt=95.0, eta=0.1, phi=0.0, hadron_flavour=5, parton_flavour=-5
            ),
            GenJetFlavourInfo(id=2, pt=60.0, eta=-1.0, phi=-1.0, hadron_flavour=0),
        ]
        builder.build(jets, gen_jets)

        first, second = builder.reco_jets
        assert first.is_gen_matched and first.gen_id == 1
        assert first.hadron_flavour == 5 and first.parton_flavour == -5
        assert first.flavour_label == "b"
        assert first.gen_delta_r == pytest.approx(0.1)
        assert second.is_gen_matched and second.gen_id == 0
        assert second.flavour_label == "c"
        assert len(builder.reco_jets_gen_match) == 2

    def test_phi_wrapping(self, builder):
        """Jets on both sides of the phi = +/-pi boundary are close."""
        jets = [Jet(pt=100.0, eta=0.0, phi=3.1)]
        gen_jets = [GenJetFlavourInfo(id=0, eta=0.0, phi=-3.1, hadron_flavour=5)]
        builder.build(jets, gen_jets)

        (jet,) = builder.reco_jets
        assert jet.is_gen_matched
        assert jet.gen_delta_r == pytest.approx(2 * np.pi - 6.2)

    def test_outside_cone(self, builder):
        """A generator jet outside the cone is not matched."""
        jets = [Jet(pt=100.0, eta=0.0, phi=0.0)]
        gen_jets = [GenJetFlavourInfo(id=0, eta=0.5, phi=0.0, hadron_flavour=5)]
        builder.build(jets, gen_jets)

        (jet,) = builder.reco_jets
        assert not jet.is_gen_matched
        assert jet.hadron_flavour == -1
        assert jet.flavour_label == "Unknown"
        assert jet.gen_delta_r == pytest.approx(0.5)

    @pytest.mark.parametrize(
        "cuts",
        [
            {"abs_eta_max": 0.0},
            {"jet_pt_min": -1.0},
            {"jet_pt_min": 2000.0},
            {"jet_pt_min": None},
            {"jet_pt_max": "high"},
            {"dr_cut": np.inf},
        ],
    )
    def test_invalid_cuts(self, cuts):
        """Selection cuts must define a non-empty acceptance."""
        cfg = {"abs_eta_max": 2.5, "jet_pt_min": 20.0, "jet_pt_max": 1000.0}
        cfg["dr_cut"] = 0.4
        cfg.update(cuts)
        with pytest.raises(InputValidationError):
            RecoJetBuilder(**cfg)

    def test_null_pt_min(self):
        """A null minimum transverse momentum is accepted."""
        builder = RecoJetBuilder(
            abs_eta_max=2.5, jet_pt_min=0, jet_pt_max="1000.", dr_cut=0.4
        )
        assert builder.jet_pt_min == 0.0
        assert builder.jet_pt_max == 1000.0

    def test_call(self, builder):
        """The builder can be called on an event dictionary."""
        products = builder({"jets": [Jet(pt=50.0, eta=0.0, phi=0.0)]})
        assert set(products) == {"reco_jets", "reco_jets_gen_match"}
        assert len(products["reco_jets"]) == 1
