"""Module with fast, Numba-accelerated, compiled math routines.

This includes multiple submodules:
- `distance.py` includes 3D distance functions, as found in scipy.distance
- `graph.py` includes graph routines, as found in scipy.csgraph
- `angular.py` includes azimuthal/pseudorapidity distance functions
"""

# Expose submodules
from . import angular, distance, graph
