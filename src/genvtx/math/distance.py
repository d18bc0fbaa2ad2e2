"""Numba JIT compiled implementation of distance computation routines.

This module is entirely dedicated to 3D points, which is the representation
of every vertex and track origin handled by this package.
"""

import numba as nb
import numpy as np

__all__ = ["euclidean", "sqeuclidean", "cdist"]


@nb.njit(cache=True)
def euclidean(x: nb.float64[:], y: nb.float64[:]) -> nb.float64:
    """Compute the Euclidean distance (L2) between two 3D points.

    Parameters
    ----------
    x : np.ndarray
        (3) Coorinates of the first point
    y : np.ndarray
        (3) Coorinates of the second point

    Returns
    -------
    float
        Euclidean distance
    """
    return np.sqrt((y[0] - x[0]) ** 2 + (y[1] - x[1]) ** 2 + (y[2] - x[2]) ** 2)


@nb.njit(cache=True)
def sqeuclidean(x: nb.float64[:], y: nb.float64[:]) -> nb.float64:
    """Compute the squared Euclidean distance (L2) between two 3D points.

    Parameters
    ----------
    x : np.ndarray
        (3) Coorinates of the first point
    y : np.ndarray
        (3) Coorinates of the second point

    Returns
    -------
    float
        Squared Euclidean distance
    """
    return (y[0] - x[0]) ** 2 + (y[1] - x[1]) ** 2 + (y[2] - x[2]) ** 2


@nb.njit(cache=True)
def cdist(x1: nb.float64[:, :], x2: nb.float64[:, :]) -> nb.float64[:, :]:
    """Numba implementation of Euclidean
    `scipy.spatial.distance.cdist(x1, x2)` in 3D.

    Parameters
    ----------
    x1 : np.ndarray
        (N, 3) array of point coordinates in the first set
    x2 : np.ndarray
        (M, 3) array of point coordinates in the second set

    Returns
    -------
    np.ndarray
        (N, M) array of pair-wise Euclidean distances
    """
    # Check on the input
    assert x1.shape[1] == 3 and x2.shape[1] == 3, "Only supports 3D points for now."

    res = np.empty((len(x1), len(x2)), dtype=x1.dtype)
    for i1 in range(len(x1)):
        for i2 in range(len(x2)):
            res[i1, i2] = euclidean(x1[i1], x2[i2])

    return res
