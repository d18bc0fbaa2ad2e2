"""Module which contains all global variables shared across the project."""

# Invalid index used to flag missing references (parents, matches, etc.)
INVAL_ID = -1

# PDG codes of the neutrino species (absolute values)
NUE_PDG = 12
NUMU_PDG = 14
NUTAU_PDG = 16
NU_PDGS = (NUE_PDG, NUMU_PDG, NUTAU_PDG)

# Generator status code of stable, final-state particles
FINAL_STATE_STATUS = 1

# Jet flavour labels (hadron/parton flavour definitions)
UDSG_FLAV = 0
CHARM_FLAV = 4
BOTTOM_FLAV = 5
FLAV_LABELS = {
    -1: "Unknown",
    UDSG_FLAV: "udsg",
    CHARM_FLAV: "c",
    BOTTOM_FLAV: "b",
}

# Default binning of the vertex count histograms (nGV, nGVs, nGVn, nGVns)
COUNT_NBINS = 10
COUNT_RANGE = (0.0, 10.0)

# Euclidean axis labels
AXES = ("x", "y", "z")
