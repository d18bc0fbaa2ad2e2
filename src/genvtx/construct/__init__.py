"""Module which builds the derived event collections.

It contains the following builders:
- :class:`GenVertexBuilder` which groups generator particles into vertices,
  links them together and matches them to simulated tracks
- :class:`RecoJetBuilder` which selects jets and matches their flavour

The :class:`BuildManager` runs the configured builders on each event.
"""

from .errors import InputValidationError, MissingPrimaryVertexError
from .jet import RecoJetBuilder
from .manager import BuildManager
from .vertex import GenVertexBuilder
