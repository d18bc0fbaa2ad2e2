"""Top-level module of the generator vertex analysis package."""

# Import main workflow entry point
from .driver import Driver
from .version import __version__

# Import commonly used data structures
from .data import GenJetFlavourInfo, GenParticle, GenVertex, Jet, PrimaryVertex
from .data import RecoJet, SimTrack

# Import the builders
from .construct import BuildManager, GenVertexBuilder, RecoJetBuilder
