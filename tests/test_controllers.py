"""
Tests for configuration loading, the route flow controller, and the CLI.

Artifacts are written beneath pytest's ``tmp_path`` so nothing touches the
project's data directory.
"""

import json

import pytest

from controllers.data_paths import DataPaths
from controllers.route_cli import main
from controllers.settings import RouteSettings, load_data_dir, load_route_settings
from controllers.toolpath_route import compute_route_flow, load_points_file, parse_route_input
from models.route_artifacts import load_route_json
from models.toolpath import ToolPoint

SQUARE = [{"x": 0, "y": 0, "r": 1}, {"x": 4, "y": 0, "r": 3}, {"x": 4, "y": 4, "r": 1}, {"x": 0, "y": 4, "r": 1}]


def test_missing_config_yields_defaults(tmp_path) -> None:
    settings = load_route_settings(tmp_path / "absent.toml")
    assert settings == RouteSettings()


def test_config_values_are_read(tmp_path) -> None:
    config = tmp_path / "config.toml"
    config.write_text(
        "[skeleton_route]\n"
        'data_dir = "out"\n'
        "tolerance = 0.5\n"
        "oracle_expansion_limit = 0\n"
        "max_radius = 2\n"
        "return_to_start = true\n"
    )
    settings = load_route_settings(config)
    assert settings.tolerance == pytest.approx(0.5)
    assert settings.oracle_expansion_limit is None
    assert settings.max_radius == pytest.approx(2.0)
    assert settings.return_to_start is True
    assert settings.best_start is False
    assert load_data_dir(config).name == "out"


def test_invalid_config_tolerance_raises(tmp_path) -> None:
    config = tmp_path / "config.toml"
    config.write_text("[skeleton_route]\ntolerance = -1\n")
    with pytest.raises(ValueError):
        load_route_settings(config)


def test_point_file_shapes(tmp_path) -> None:
    bare = tmp_path / "bare.json"
    bare.write_text(json.dumps(SQUARE))
    assert load_points_file(bare).kind == "points"

    loops = parse_route_input({"loops": [SQUARE, SQUARE]})
    assert loops.kind == "loops"
    assert loops.point_count == 8

    with pytest.raises(ValueError):
        parse_route_input({"shapes": []})
    with pytest.raises(FileNotFoundError):
        load_points_file(tmp_path / "missing.json")


def test_route_flow_writes_route_and_preview(tmp_path) -> None:
    paths = DataPaths.from_data_dir(tmp_path)
    flow = compute_route_flow(
        parse_route_input({"points": SQUARE}),
        sample_name="points_square.json",
        settings=RouteSettings(max_radius=2.0),
        data_paths=paths,
    )
    assert flow.route_path == paths.route_dir / "route_square.json"
    assert flow.preview_path == paths.preview_dir / "preview_square.png"
    assert flow.preview_path.read_bytes().startswith(b"\x89PNG")

    saved = load_route_json(flow.route_path)
    assert saved == flow.result.points
    assert max(point.r for point in saved) == pytest.approx(2.0)
    payload = json.loads(flow.route_path.read_text())
    assert payload["sample"] == "square"
    assert payload["complete"] is True
    assert "4 input point(s)" in flow.message


def test_route_flow_passes_single_point_through(tmp_path) -> None:
    flow = compute_route_flow(
        parse_route_input([{"x": 1, "y": 1, "r": 0.2}]),
        sample_name="single",
        settings=RouteSettings(),
        write_artifacts=False,
    )
    assert flow.graph is None
    assert flow.result.points == [ToolPoint(1.0, 1.0, 0.2)]
    assert flow.route_path is None


def test_cli_routes_a_point_file(tmp_path, capsys) -> None:
    source = tmp_path / "shape.json"
    source.write_text(json.dumps({"points": SQUARE}))
    data_dir = tmp_path / "data"
    code = main([str(source), "--data-dir", str(data_dir), "--no-preview", "--return-to-start"])
    assert code == 0
    route = load_route_json(data_dir / "routes" / "route_shape.json")
    assert route[0] == route[-1]
    assert "Route written to" in capsys.readouterr().out


def test_cli_reports_bad_input(tmp_path, capsys) -> None:
    source = tmp_path / "broken.json"
    source.write_text("{not json")
    assert main([str(source), "--data-dir", str(tmp_path)]) == 1
    assert "error:" in capsys.readouterr().err


def test_config_flags_must_be_booleans(tmp_path) -> None:
    config = tmp_path / "config.toml"
    config.write_text('[skeleton_route]\nreturn_to_start = "false"\n')
    with pytest.raises(ValueError):
        load_route_settings(config)

    other = tmp_path / "other.toml"
    other.write_text("[skeleton_route]\nbest_start = 1\n")
    with pytest.raises(ValueError):
        load_route_settings(other)


def test_best_start_is_read_from_config(tmp_path) -> None:
    config = tmp_path / "config.toml"
    config.write_text("[skeleton_route]\nbest_start = true\n")
    assert load_route_settings(config).best_start is True


def test_route_flow_writes_site_graph(tmp_path) -> None:
    paths = DataPaths.from_data_dir(tmp_path)
    flow = compute_route_flow(
        parse_route_input({"points": SQUARE}),
        sample_name="points_square.json",
        settings=RouteSettings(),
        data_paths=paths,
        render_preview=False,
    )
    assert flow.graph_path == paths.graph_dir / "graph_square.json"
    payload = json.loads(flow.graph_path.read_text())
    assert len(payload["sites"]) == 4
    assert flow.preview_path is None


def segment(p, q):
    return {"point0": {"x": p[0], "y": p[1]}, "point1": {"x": q[0], "y": q[1]}}


def test_cli_best_start_routes_from_the_better_end(tmp_path) -> None:
    source = tmp_path / "arms.json"
    source.write_text(
        json.dumps({"segments": [segment((0, 0), (1, 0)), segment((1, 0), (10, 0)), segment((1, 0), (1, 1))]})
    )
    data_dir = tmp_path / "data"
    assert main([str(source), "--data-dir", str(data_dir), "--no-preview"]) == 0
    default_route = load_route_json(data_dir / "routes" / "route_arms.json")
    assert default_route[0] == ToolPoint(0.0, 0.0)

    assert main([str(source), "--data-dir", str(data_dir), "--no-preview", "--best-start"]) == 0
    best_route = load_route_json(data_dir / "routes" / "route_arms.json")
    assert best_route[0] == ToolPoint(10.0, 0.0)
    assert (data_dir / "graphs" / "graph_arms.json").is_file()


def test_cli_reports_out_of_range_coordinates(tmp_path, capsys) -> None:
    source = tmp_path / "huge.json"
    source.write_text(json.dumps([[1e307, 0.0], [1.0, 1.0]]))
    assert main([str(source), "--data-dir", str(tmp_path), "--no-preview"]) == 1
    assert "error:" in capsys.readouterr().err
