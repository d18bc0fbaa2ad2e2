"""Numba JIT compiled angular distance routines used to match jets."""

import numba as nb
import numpy as np

__all__ = ["delta_phi", "delta_r", "delta_r_matrix"]


@nb.njit(cache=True)
def delta_phi(phi1: nb.float64, phi2: nb.float64) -> nb.float64:
    """Compute the azimuthal angle difference, wrapped in [-pi, pi).

    Parameters
    ----------
    phi1 : float
        First azimuthal angle
    phi2 : float
        Second azimuthal angle

    Returns
    -------
    float
        Signed azimuthal angle difference
    """
    return np.mod(phi1 - phi2 + np.pi, 2 * np.pi) - np.pi


@nb.njit(cache=True)
def delta_r(
    eta1: nb.float64, phi1: nb.float64, eta2: nb.float64, phi2: nb.float64
) -> nb.float64:
    """Compute the angular distance in the (eta, phi) plane.

    Parameters
    ----------
    eta1, phi1 : float
        Pseudorapidity and azimuthal angle of the first object
    eta2, phi2 : float
        Pseudorapidity and azimuthal angle of the second object

    Returns
    -------
    float
        Angular distance
    """
    return np.sqrt((eta1 - eta2) ** 2 + delta_phi(phi1, phi2) ** 2)


@nb.njit(cache=True)
def delta_r_matrix(
    eta1: nb.float64[:], phi1: nb.float64[:], eta2: nb.float64[:], phi2: nb.float64[:]
) -> nb.float64[:, :]:
    """Compute the angular distance between every pair of objects in two sets.

    Parameters
    ----------
    eta1, phi1 : np.ndarray
        (N) Pseudorapidities and azimuthal angles of the first set
    eta2, phi2 : np.ndarray
        (M) Pseudorapidities and azimuthal angles of the second set

    Returns
    -------
    np.ndarray
        (N, M) array of pair-wise angular distances
    """
    res = np.empty((len(eta1), len(eta2)), dtype=np.float64)
    for i in range(len(eta1)):
        for j in range(len(eta2)):
            res[i, j] = delta_r(eta1[i], phi1[i], eta2[j], phi2[j])

    return res
