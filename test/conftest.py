"""Sets up fixtures general to the entire test suite of this package.

This file is read during the collection phase of pytest when running anything
inside this directory.
"""

import numpy as np
import pytest

from genvtx.data import GenParticle, PrimaryVertex, SimTrack

# PDG codes used to populate random events
RANDOM_PDGS = (211, -211, 321, 22, 11, 13, 12, -14, 16, 511, 421)


def make_particle(id, parent_id, position, pdg_id=211, **kwargs):
    """Builds a generator particle with sensible defaults."""
    return GenParticle(
        id=id,
        pdg_id=pdg_id,
        status=1,
        parent_id=parent_id,
        position=position,
        momentum=kwargs.pop("momentum", [1.0, 0.0, 1.0, 2.0]),
        **kwargs,
    )


def make_track(id, position, gen_id=-1, pdg_id=211):
    """Builds a simulated track with sensible defaults."""
    return SimTrack(
        id=id,
        pdg_id=pdg_id,
        gen_id=gen_id,
        position=position,
        momentum=[1.0, 0.0, 1.0, 2.0],
    )


def make_event(seed, num_vertices=8, jitter=1e-7, track_prob=0.5):
    """Generates a random decay tree and the simulated tracks around it.

    Every vertex sits at a random location in a (20 cm)^3 box, its daughters
    are produced within `jitter` of it. Particle and track IDs are shuffled so
    that they carry no information about the tree structure.

    Parameters
    ----------
    seed : int
        Random number generator seed
    num_vertices : int, default 8
        Number of decay vertices to generate
    jitter : float, default 1e-7
        Spread of the daughter production points around their vertex
    track_prob : float, default 0.5
        Probability for each daughter to leave a simulated track

    Returns
    -------
    Tuple[List[GenParticle], List[SimTrack]]
        Generator particles and simulated tracks
    """
    rng = np.random.default_rng(seed)

    # Build the tree with sequential labels first: (parent, position, pdg)
    nodes = [(-1, np.zeros(3), 2212)]
    undecayed = [0]
    for _ in range(num_vertices):
        mother = undecayed.pop(rng.integers(len(undecayed)))
        vertex = rng.uniform(-10.0, 10.0, size=3)
        for _ in range(rng.integers(1, 4)):
            position = vertex + rng.uniform(-jitter, jitter, size=3)
            nodes.append((mother, position, int(rng.choice(RANDOM_PDGS))))
            undecayed.append(len(nodes) - 1)

    # Shuffle the labels into sparse identifiers
    ids = rng.permutation(10 * len(nodes))[: len(nodes)]
    particles, tracks = [], []
    for i, (parent, position, pdg) in enumerate(nodes):
        parent_id = ids[parent] if parent > -1 else -1
        particles.append(make_particle(int(ids[i]), int(parent_id), position, pdg))
        if parent > -1 and rng.uniform() < track_prob:
            offset = rng.normal(0.0, 0.01, size=3)
            tracks.append(make_track(len(tracks), position + offset, int(ids[i])))

    # Shuffle the track IDs too
    track_ids = rng.permutation(10 * max(len(tracks), 1))[: len(tracks)]
    for track, track_id in zip(tracks, track_ids):
        track.id = int(track_id)

    return particles, tracks


@pytest.fixture(name="primary")
def fixture_primary():
    """Primary vertex located at the origin."""
    return PrimaryVertex(position=[0.0, 0.0, 0.0], num_tracks=10)


@pytest.fixture(name="random_event")
def fixture_random_event(request):
    """Random event, seeded by the parameter of the test (0 by default)."""
    seed = getattr(request, "param", 0)
    return make_event(seed)


@pytest.fixture(name="neutrino_chain")
def fixture_neutrino_chain():
    """Decay chain in which the middle vertex only produces a neutrino.

    - p0 is the root particle, it decays at (1, 0, 0) into p1
    - p1 decays at (2, 0, 0) into a single neutrino p2
    - p2 "decays" at (3, 0, 0) into p3
    """
    return [
        make_particle(0, -1, [0.0, 0.0, 0.0], pdg_id=23),
        make_particle(1, 0, [1.0, 0.0, 0.0], pdg_id=511),
        make_particle(2, 1, [2.0, 0.0, 0.0], pdg_id=14),
        make_particle(3, 2, [3.0, 0.0, 0.0], pdg_id=211),
    ]


@pytest.fixture(name="particle")
def fixture_particle():
    """Factory used to build generator particles."""
    return make_particle


@pytest.fixture(name="track")
def fixture_track():
    """Factory used to build simulated tracks."""
    return make_track


@pytest.fixture(name="event_generator")
def fixture_event_generator():
    """Factory used to build random events."""
    return make_event
