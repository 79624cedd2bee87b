"""
Unit tests for site deduplication and adjacency construction.

These cover the tolerance-based merge of coincident points, the cyclic
predecessor/successor linking (including the wrap-around edge of an open
polyline), and the medial-axis segment builder.
"""

import pytest

from models.site_graph import (
    Site,
    SiteGraph,
    build_site_graph,
    build_site_graph_from_loops,
    build_site_graph_from_segments,
    quantize_key,
)


def k(x: float, y: float):
    return quantize_key(x, y)


def test_coincident_points_merge_and_keep_first_radius() -> None:
    """Points within 0.01 collapse into one site; the first radius seen wins."""
    graph = build_site_graph(
        [
            {"x": 0.0, "y": 0.0, "r": 1.0},
            {"x": 1.0, "y": 0.0, "r": 2.0},
            {"x": 0.004, "y": 0.003, "r": 9.0},
        ]
    )
    assert len(graph.sites) == 2
    site = graph.sites[k(0, 0)]
    assert site.occurrences == 2
    assert site.r == pytest.approx(1.0)
    assert site.x == pytest.approx(0.0)
    assert not site.is_terminal
    assert graph.sites[k(1, 0)].is_terminal


def test_open_polyline_gets_wrap_around_edge() -> None:
    """An open sequence is treated as cyclic, linking its last point to its first."""
    graph = build_site_graph([(0, 0), (1, 0), (2, 0)])
    # Predecessor first, then successor.
    assert graph.adjacency[k(0, 0)] == [k(2, 0), k(1, 0)]
    assert k(0, 0) in graph.adjacency[k(2, 0)]


def test_duplicate_edges_are_suppressed() -> None:
    graph = build_site_graph([(0, 0), (1, 0), (2, 0), (1, 0)])
    assert graph.adjacency[k(1, 0)] == [k(0, 0), k(2, 0)]
    assert graph.adjacency[k(0, 0)] == [k(1, 0)]
    assert graph.sites[k(1, 0)].occurrences == 2
    assert graph.terminals() == [k(0, 0), k(2, 0)]
    assert graph.junctions() == [k(1, 0)]


def test_self_edges_are_not_created() -> None:
    graph = build_site_graph([(0, 0), (0.001, 0), (1, 0)])
    assert k(0, 0) not in graph.adjacency[k(0, 0)]
    assert graph.adjacency[k(0, 0)] == [k(1, 0)]


def test_loops_share_sites_by_coordinate() -> None:
    graph = build_site_graph_from_loops([[(0, 0), (1, 0)], [(1, 0), (1, 1)]])
    assert graph.sites[k(1, 0)].occurrences == 2
    assert graph.adjacency[k(1, 0)] == [k(0, 0), k(1, 1)]


def test_referenced_keys_follow_build_order() -> None:
    graph = build_site_graph([(5, 5), (0, 0), (3, 1)])
    assert graph.referenced_keys() == [k(5, 5), k(0, 0), k(3, 1)]


def test_segments_count_endpoint_occurrences() -> None:
    """A site used by a single segment is a terminal; shared endpoints are junctions."""
    segments = [
        {"point0": {"x": 0, "y": 0, "radius": 0.5}, "point1": {"x": 1, "y": 0, "radius": 0.7}},
        {"point0": {"x": 1, "y": 0}, "point1": {"x": 2, "y": 0}},
        {"point0": {"x": 1, "y": 0}, "point1": {"x": 1, "y": 1}},
    ]
    graph = build_site_graph_from_segments(segments)
    assert graph.sites[k(1, 0)].occurrences == 3
    assert graph.sites[k(1, 0)].r == pytest.approx(0.7)
    assert graph.adjacency[k(1, 0)] == [k(0, 0), k(2, 0), k(1, 1)]
    assert set(graph.terminals()) == {k(0, 0), k(2, 0), k(1, 1)}


def test_segment_without_endpoints_is_rejected() -> None:
    with pytest.raises(ValueError):
        build_site_graph_from_segments([{"point0": {"x": 0, "y": 0}}])


def test_isolated_site_counts_as_terminal() -> None:
    key = k(3, 3)
    graph = SiteGraph(sites={key: Site(key=key, x=3.0, y=3.0, occurrences=4)}, adjacency={})
    assert graph.is_terminal(key)


def test_invalid_tolerance_and_points() -> None:
    with pytest.raises(ValueError):
        build_site_graph([(0, 0), (1, 1)], tolerance=0)
    with pytest.raises(ValueError):
        build_site_graph([{"x": 0.0}, {"x": 1.0, "y": 1.0}])


def test_payload_lists_sites_and_edges(tmp_path) -> None:
    graph = build_site_graph([(0, 0), (1, 0)])
    payload = graph.to_payload()
    assert [site["occurrences"] for site in payload["sites"]] == [1, 1]
    assert len(payload["edges"]) == 2
    saved = graph.save(tmp_path / "graph.json")
    assert saved.read_text().startswith("{")


def test_coordinates_too_large_for_the_tolerance_are_rejected() -> None:
    with pytest.raises(ValueError):
        quantize_key(1e307, 0.0)
    with pytest.raises(ValueError):
        build_site_graph([(0.0, 0.0), (1.0, 1e307)])
