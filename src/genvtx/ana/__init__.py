"""Analysis tools.

This module contains the scripts which turn the derived event collections
into histograms and CSV tables:
- ``vertex_count``: histograms of the number of vertices in each collection
- ``event``: one row per event with the size of each collection
- ``vertex_tree``: one row per generator vertex with its attributes
"""

from .hist import Histogram, HistogramCollection
from .manager import AnaManager
