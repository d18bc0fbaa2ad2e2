"""Tests of the generator vertex builder."""

import logging

import numpy as np
import pytest

from genvtx.construct import (
    GenVertexBuilder,
    InputValidationError,
    MissingPrimaryVertexError,
)
from genvtx.data import PrimaryVertex

# Collections exposed by the builder
PRODUCTS = (
    "gen_vertices",
    "gen_vertices_sim_match",
    "gen_vertices_no_nu",
    "gen_vertices_no_nu_sim_match",
)


@pytest.fixture(name="builder")
def fixture_builder():
    """Vertex builder with a 1 um clustering tolerance and a 500 um matching
    distance."""
    return GenVertexBuilder(pos_tolerance=1e-4, sim_match_dist=0.05)


def vertex_summary(vertex):
    """Reduces a vertex to the quantities which define it."""
    return (
        tuple(vertex.position),
        tuple(vertex.daughter_ids),
        vertex.parent_id,
        vertex.parent_id_no_nu,
        vertex.is_sim_matched,
        vertex.is_neutrino_only,
    )


class TestConfiguration:
    """Checks on the builder parameters."""

    @pytest.mark.parametrize("value", [0.0, -1.0, np.inf, np.nan, None])
    def test_invalid_tolerance(self, value):
        """The clustering tolerance must be positive and finite."""
        with pytest.raises(InputValidationError):
            GenVertexBuilder(pos_tolerance=value, sim_match_dist=0.05)

    @pytest.mark.parametrize("value", [0.0, -0.05, np.inf])
    def test_invalid_match_distance(self, value):
        """The matching distance must be positive and finite."""
        with pytest.raises(InputValidationError):
            GenVertexBuilder(pos_tolerance=1e-4, sim_match_dist=value)

    @pytest.mark.parametrize("value", ["far", "", [1.0], {"value": 1.0}])
    def test_non_numeric_cut(self, value):
        """Cuts which are not numbers are rejected as invalid input."""
        with pytest.raises(InputValidationError):
            GenVertexBuilder(pos_tolerance=value, sim_match_dist=0.05)

    def test_numeric_string_cut(self):
        """Cuts given as numeric strings, as YAML loads `1e-4`, are converted."""
        builder = GenVertexBuilder(pos_tolerance="1e-4", sim_match_dist=0.05)
        assert builder.pos_tolerance == 1e-4

    def test_missing_parameters(self):
        """Both distances are required."""
        with pytest.raises(TypeError):
            GenVertexBuilder(pos_tolerance=1e-4)


class TestScenarios:
    """Reference events with a known outcome."""

    def test_empty_event(self, builder, primary):
        """No particles and no tracks produce four empty collections."""
        builder.build([], [], primary)
        for key in PRODUCTS:
            assert getattr(builder, key) == []

    def test_coincident_decays(self, builder, primary, particle):
        """Two particles produced within tolerance form a single vertex."""
        particles = [
            particle(0, -1, [0.0, 0.0, 0.0], pdg_id=511),
            particle(1, 0, [1.0, 1.0, 1.0]),
            particle(2, 0, [1.0 + 1e-6, 1.0 + 1e-6, 1.0 + 1e-6]),
        ]
        builder.build(particles, [], primary)

        vertices = builder.gen_vertices
        assert len(vertices) == 1
        assert vertices[0].num_daughters == 2
        assert list(vertices[0].daughter_ids) == [1, 2]
        assert vertices[0].mother_id == 0
        assert vertices[0].mother_pdg_id == 511
        assert vertices[0].is_primary
        np.testing.assert_array_equal(vertices[0].position, [1.0, 1.0, 1.0])

    def test_neutrino_only_vertex(self, builder, primary, neutrino_chain):
        """A neutrino-only vertex is spliced out of the no-neutrino ancestry."""
        builder.build(neutrino_chain, [], primary)

        grand, nu_vertex, downstream = builder.gen_vertices
        assert grand.mother_id == 0 and grand.is_primary
        assert nu_vertex.is_neutrino_only
        assert nu_vertex.parent_id == grand.id
        assert downstream.parent_id == nu_vertex.id
        assert downstream.parent_id_no_nu == grand.id

        no_nu = builder.gen_vertices_no_nu
        assert len(no_nu) == len(builder.gen_vertices) - 1
        assert nu_vertex not in no_nu

    @pytest.mark.parametrize("cut, matched", [(0.05, True), (0.001, False)])
    def test_sim_match_cut(self, primary, particle, track, cut, matched):
        """A track origin 100 um away matches with a 500 um cut only."""
        builder = GenVertexBuilder(pos_tolerance=1e-4, sim_match_dist=cut)
        particles = [
            particle(0, -1, [0.0, 0.0, -1.0]),
            particle(1, 0, [0.0, 0.0, 0.0]),
        ]
        tracks = [track(7, [0.0, 0.0, 0.01], gen_id=1)]
        builder.build(particles, tracks, primary)

        (vertex,) = builder.gen_vertices
        assert vertex.is_sim_matched == matched
        assert vertex.sim_distance == pytest.approx(0.01)
        assert len(builder.gen_vertices_sim_match) == int(matched)
        if matched:
            assert vertex.num_sim_tracks == 1
            assert vertex.sim_track_id == 7
            assert vertex.sim_gen_id == 1
        else:
            assert vertex.num_sim_tracks == 0
            assert vertex.sim_track_id == -1


class TestProperties:
    """Laws which hold for any event."""

    @pytest.mark.parametrize("random_event", range(5), indirect=True)
    def test_permutation_invariance(self, builder, primary, random_event):
        """Shuffling the inputs does not change the output at all."""
        particles, tracks = random_event
        builder.build(particles, tracks, primary)
        reference = builder.gen_vertices

        rng = np.random.default_rng(123)
        for _ in range(3):
            perm_p = [particles[i] for i in rng.permutation(len(particles))]
            perm_t = [tracks[i] for i in rng.permutation(len(tracks))]
            builder.build(perm_p, perm_t, primary)
            assert builder.gen_vertices == reference

    @pytest.mark.parametrize("random_event", range(5), indirect=True)
    def test_conservation(self, builder, primary, random_event):
        """Every particle with a parent is a daughter of exactly one vertex."""
        particles, tracks = random_event
        builder.build(particles, tracks, primary)

        daughters = np.concatenate([v.daughter_ids for v in builder.gen_vertices])
        expected = sorted(p.id for p in particles if p.has_parent)
        assert sorted(daughters) == expected

    @pytest.mark.parametrize("random_event", range(5), indirect=True)
    def test_subset_laws(self, builder, primary, random_event):
        """The derived collections are filters of the full collection."""
        particles, tracks = random_event
        builder.build(particles, tracks, primary)

        all_ids = {v.id for v in builder.gen_vertices}
        sim_ids = {v.id for v in builder.gen_vertices_sim_match}
        no_nu_ids = {v.id for v in builder.gen_vertices_no_nu}
        both_ids = {v.id for v in builder.gen_vertices_no_nu_sim_match}

        assert sim_ids <= all_ids
        assert no_nu_ids <= all_ids
        assert both_ids == sim_ids & no_nu_ids

    @pytest.mark.parametrize("random_event", range(5), indirect=True)
    def test_ancestry(self, builder, primary, random_event):
        """The ancestry is acyclic, ids are positions in the collection and the
        no-neutrino ancestry skips the neutrino-only vertices."""
        particles, tracks = random_event
        builder.build(particles, tracks, primary)

        vertices = builder.gen_vertices
        assert [v.id for v in vertices] == list(range(len(vertices)))
        for vertex in vertices:
            # Walk up the ancestry, must reach the primary vertex
            seen, parent = set(), vertex.parent_id
            while parent > -1:
                assert parent not in seen
                seen.add(parent)
                parent = vertices[parent].parent_id

            # The no-neutrino parent is the first ancestor with other daughters
            expected = vertex.parent_id
            while expected > -1 and vertices[expected].is_neutrino_only:
                expected = vertices[expected].parent_id
            assert vertex.parent_id_no_nu == expected

    @pytest.mark.parametrize("random_event", range(3), indirect=True)
    def test_idempotence(self, builder, primary, random_event):
        """Building twice gives the same collections, with fresh objects."""
        particles, tracks = random_event
        builder.build(particles, tracks, primary)
        first = builder.products()
        builder.build(particles, tracks, primary)
        second = builder.products()

        for key in PRODUCTS:
            assert first[key] == second[key]

        fresh = GenVertexBuilder(pos_tolerance=1e-4, sim_match_dist=0.05)
        fresh.build(particles, tracks, primary)
        assert fresh.gen_vertices == first["gen_vertices"]

    def test_vertices_are_separated(self, builder, primary, particle):
        """No two vertices are closer than the clustering tolerance, even when
        production points form a chain longer than the tolerance."""
        step = 0.6e-4
        particles = [particle(0, -1, [0.0, 0.0, 0.0])]
        particles += [particle(i, 0, [1.0 + i * step, 0.0, 0.0]) for i in range(1, 6)]
        particles += [particle(10, 1, [2.0, 0.0, 0.0])]
        builder.build(particles, [], primary)

        vertices = builder.gen_vertices
        assert len(vertices) == 2
        assert list(vertices[0].daughter_ids) == [1, 2, 3, 4, 5]
        np.testing.assert_array_equal(vertices[0].position, [1.0 + step, 0.0, 0.0])
        for i, vi in enumerate(vertices):
            for vj in vertices[i + 1 :]:
                assert np.linalg.norm(vi.position - vj.position) >= 1e-4

    @pytest.mark.parametrize("seed", [0, 1, 2])
    def test_cluster_representatives(self, builder, seed):
        """The first point of each group is out of reach of every other group."""
        rng = np.random.default_rng(seed)
        points = rng.uniform(0.0, 5e-4, size=(40, 3))
        labels = builder.cluster_points(points)

        _, first = np.unique(labels, return_index=True)
        for i in first:
            dists = np.linalg.norm(points - points[i], axis=1)
            assert np.all(dists[labels != labels[i]] >= builder.pos_tolerance)

    def test_state_is_replaced(self, builder, primary, neutrino_chain):
        """Each build fully replaces the previous collections."""
        builder.build(neutrino_chain, [], primary)
        assert len(builder.gen_vertices) == 3
        builder.build([], [], primary)
        for key in PRODUCTS:
            assert getattr(builder, key) == []


class TestAncestry:
    """Parent vertex assignment in unusual decay topologies."""

    def test_canonical_order(self, builder, primary, particle):
        """Vertices are ordered by incoming particle, then by position."""
        particles = [
            particle(5, -1, [0.0, 0.0, 0.0]),
            particle(3, 5, [2.0, 0.0, 0.0]),
            particle(4, 5, [1.0, 0.0, 0.0]),
            particle(1, 3, [5.0, 0.0, 0.0]),
        ]
        builder.build(particles, [], primary)

        vertices = builder.gen_vertices
        assert [v.mother_id for v in vertices] == [3, 5, 5]
        assert vertices[1].position[0] == 1.0
        assert vertices[2].position[0] == 2.0
        assert vertices[0].parent_id == 2

    def test_zero_flight_intermediate(self, builder, primary, particle):
        """A particle which decays where it is produced is walked through to
        find the parent vertex."""
        particles = [
            particle(6, -1, [0.0, 0.0, 0.0]),
            particle(4, 6, [1.0, 0.0, 0.0]),
            particle(3, 4, [2.0, 0.0, 0.0]),
            particle(0, 3, [2.0, 0.0, 0.0]),
        ]
        builder.build(particles, [], primary)

        vertex_a, vertex_b = builder.gen_vertices
        assert list(vertex_a.daughter_ids) == [0, 3]
        assert list(vertex_a.mother_ids) == [3, 4]
        assert vertex_a.mother_id == 3
        assert vertex_a.parent_id == vertex_b.id
        assert list(vertex_b.daughter_ids) == [4]
        assert vertex_b.is_primary

    def test_dangling_parent(self, builder, primary, particle, caplog):
        """A parent reference to a missing particle makes the particle a root."""
        particles = [
            particle(0, -1, [0.0, 0.0, 0.0]),
            particle(1, 0, [1.0, 0.0, 0.0]),
            particle(2, 99, [3.0, 0.0, 0.0]),
            particle(3, 3, [4.0, 0.0, 0.0]),
        ]
        with caplog.at_level(logging.WARNING, logger="genvtx"):
            builder.build(particles, [], primary)

        (vertex,) = builder.gen_vertices
        assert list(vertex.daughter_ids) == [1]
        assert "invalid parent" in caplog.text

    def test_null_parent(self, builder, primary, particle):
        """A null parent reference makes the particle a root."""
        particles = [
            particle(0, None, [0.0, 0.0, 0.0]),
            particle(1, 0, [1.0, 0.0, 0.0]),
        ]
        assert particles[0].parent_id == -1
        assert not particles[0].has_parent

        builder.build(particles, [], primary)

        (vertex,) = builder.gen_vertices
        assert vertex.mother_id == 0
        assert list(vertex.daughter_ids) == [1]
        assert vertex.is_primary

    def test_ancestry_cycle(self, builder, primary, particle, caplog):
        """Particles which are each other's parent cannot create a loop."""
        particles = [
            particle(1, 2, [1.0, 0.0, 0.0]),
            particle(2, 1, [2.0, 0.0, 0.0]),
        ]
        with caplog.at_level(logging.WARNING, logger="genvtx"):
            builder.build(particles, [], primary)

        vertices = builder.gen_vertices
        assert len(vertices) == 2
        assert sum(v.is_primary for v in vertices) == 1
        assert vertices[0].parent_id == 1
        assert vertices[1].is_primary
        assert "cycle" in caplog.text


class TestSimMatching:
    """Matching of the vertices to the simulated track origins."""

    def test_no_tracks(self, builder, primary, neutrino_chain):
        """Without tracks, nothing is matched."""
        builder.build(neutrino_chain, None, primary)
        assert builder.gen_vertices_sim_match == []
        assert builder.gen_vertices_no_nu_sim_match == []
        for vertex in builder.gen_vertices:
            assert vertex.num_sim_tracks == 0
            assert vertex.sim_distance == np.inf

    def test_all_tracks_count(self, builder, primary, particle, track):
        """Every track within the cut counts, the closest one is reported."""
        particles = [
            particle(0, -1, [0.0, 0.0, 0.0]),
            particle(1, 0, [1.0, 0.0, 0.0]),
        ]
        tracks = [
            track(9, [1.0, 0.0, 0.02], gen_id=1),
            track(4, [1.0, 0.03, 0.0], gen_id=2),
            track(2, [1.0, 0.0, 0.01], gen_id=3),
            track(1, [1.0, 0.0, 0.5], gen_id=4),
        ]
        builder.build(particles, tracks, primary)

        (vertex,) = builder.gen_vertices
        assert vertex.num_sim_tracks == 3
        assert vertex.sim_track_id == 2
        assert vertex.sim_gen_id == 3
        assert vertex.sim_distance == pytest.approx(0.01)

    def test_tie_break(self, builder, primary, particle, track):
        """Equidistant tracks are resolved in favor of the lowest ID."""
        particles = [
            particle(0, -1, [0.0, 0.0, 0.0]),
            particle(1, 0, [1.0, 0.0, 0.0]),
        ]
        tracks = [
            track(8, [1.0, 0.0, 0.01], gen_id=8),
            track(3, [1.0, 0.0, -0.01], gen_id=3),
        ]
        builder.build(particles, tracks, primary)

        (vertex,) = builder.gen_vertices
        assert vertex.num_sim_tracks == 2
        assert vertex.sim_track_id == 3

    def test_primary_distance(self, builder, particle):
        """The distance to the primary vertex is recorded on each vertex."""
        particles = [
            particle(0, -1, [0.0, 0.0, 0.0]),
            particle(1, 0, [3.0, 4.0, 1.0]),
        ]
        builder.build(particles, [], PrimaryVertex(position=[0.0, 0.0, 1.0]))
        assert builder.gen_vertices[0].pv_distance == pytest.approx(5.0)

        builder.build(particles, [], np.array([3.0, 4.0, 1.0]))
        assert builder.gen_vertices[0].pv_distance == pytest.approx(0.0)


class TestValidation:
    """Rejection of malformed inputs."""

    def test_missing_primary(self, builder, neutrino_chain):
        """A primary vertex is a precondition of the build."""
        with pytest.raises(MissingPrimaryVertexError):
            builder.build(neutrino_chain, [], None)

    def test_nan_primary(self, builder, neutrino_chain):
        """The primary vertex position must be finite."""
        with pytest.raises(InputValidationError):
            builder.build(neutrino_chain, [], PrimaryVertex())

    @pytest.mark.parametrize("attr", ["position", "end_position"])
    def test_nan_particle(self, builder, primary, neutrino_chain, attr):
        """NaN particle positions are rejected, whatever the tolerance."""
        getattr(neutrino_chain[2], attr)[1] = np.nan
        with pytest.raises(InputValidationError):
            builder.build(neutrino_chain, [], primary)

    def test_nan_track(self, builder, primary, neutrino_chain, track):
        """NaN track origins are rejected."""
        tracks = [track(0, [np.nan, 0.0, 0.0])]
        with pytest.raises(InputValidationError):
            builder.build(neutrino_chain, tracks, primary)

    def test_duplicate_ids(self, builder, primary, particle):
        """Particle identifiers must be unique."""
        particles = [
            particle(0, -1, [0.0, 0.0, 0.0]),
            particle(1, 0, [1.0, 0.0, 0.0]),
            particle(1, 0, [2.0, 0.0, 0.0]),
        ]
        with pytest.raises(InputValidationError):
            builder.build(particles, [], primary)

    def test_missing_product(self, builder):
        """Calling the builder on an incomplete event names the missing key."""
        with pytest.raises(KeyError, match="gen_particles"):
            builder({"primary_vertex": np.zeros(3)})
