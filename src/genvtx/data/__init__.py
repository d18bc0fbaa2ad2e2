"""Data structures used to describe the content of one event.

**Input records** (supplied by the surrounding framework):
- `GenParticle`: generator-level particle with its parent reference
- `SimTrack`: detector simulation track, linked back to a generator particle
- `PrimaryVertex`: reconstructed primary interaction point
- `Jet`, `GenJetFlavourInfo`: reconstructed jets and generator jet flavours

**Derived records** (produced by the builders in :mod:`genvtx.construct`):
- `GenVertex`: decay point inferred from the generator particle ancestry
- `RecoJet`: selected jet with its flavour truth

All data structures inherit from :class:`DataBase`, which provides numpy-aware
equality, default array attributes and conversion to flat dictionaries.
"""

from .base import DataBase, PosDataBase
from .jet import *
from .particle import *
from .vertex import *
