"""Tests for the maplat-inspect command."""

import json
import logging

import pytest

from maplat.cli import inspect_map, main

pytestmark = pytest.mark.integration


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    for handler in root.handlers[:]:
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    for handler in handlers:
        if handler not in root.handlers:
            root.addHandler(handler)
    root.setLevel(level)


@pytest.fixture
def descriptor_file(tmp_path, legacy_doc):
    path = tmp_path / "demo.json"
    path.write_text(json.dumps(legacy_doc), encoding="utf-8")
    return path


class TestInspectMap:

    def test_report_of_tin_map(self, descriptor_file):
        report, = inspect_map(str(descriptor_file))

        assert report["map_id"] == "demo"
        assert report["strategy"] == "custom_pixel"
        assert report["projection"] == "Maplat:demo"
        assert report["units"] == "pixels"
        assert report["extent"] == [0.0, -600.0, 1000.0, 0.0]
        assert [t["resolution"] for t in report["tiles"]] == [4, 2, 1]
        assert report["tiles"][2]["columns"] == 4
        assert "point" not in report

    def test_point_is_transformed(self, descriptor_file):
        report, = inspect_map(str(descriptor_file), point=(0.0, 0.0))

        assert report["point"]["EPSG:3857"] == pytest.approx([15540000.0, 4300000.0])
        lon, lat = report["point"]["EPSG:4326"]
        assert 139.0 < lon < 140.0

    def test_sub_maps_are_reported(self, tmp_path, legacy_doc, compiled):
        legacy_doc["sub_maps"] = [{"compiled": compiled}]
        path = tmp_path / "with_sub.json"
        path.write_text(json.dumps(legacy_doc), encoding="utf-8")

        reports = inspect_map(str(path))
        assert [r["map_id"] for r in reports] == ["demo", "demo#1"]


class TestMain:

    def test_text_output(self, descriptor_file, capsys):
        assert main([str(descriptor_file)]) == 0

        out = capsys.readouterr().out
        assert out.startswith("demo\n")
        assert "projection:   Maplat:demo (pixels)" in out
        assert "tier z=2: 4x3 tiles, resolution 1" in out

    def test_json_output_with_point(self, descriptor_file, capsys):
        assert main([str(descriptor_file), "--json", "--point", "100", "50"]) == 0

        reports = json.loads(capsys.readouterr().out)
        assert reports[0]["point"]["input"] == [100.0, 50.0]

    def test_map_id_override(self, descriptor_file, capsys):
        assert main([str(descriptor_file), "--json", "--map-id", "renamed"]) == 0
        assert json.loads(capsys.readouterr().out)[0]["projection"] == "Maplat:renamed"

    def test_user_config_file(self, descriptor_file, tmp_path, capsys):
        config = tmp_path / "user.json"
        config.write_text(json.dumps({"TILE_SIZE": 512}), encoding="utf-8")

        assert main([str(descriptor_file), "--json", "--config", str(config)]) == 0
        reports = json.loads(capsys.readouterr().out)
        assert [t["resolution"] for t in reports[0]["tiles"]] == [2, 1]

    def test_malformed_descriptor_returns_error(self, tmp_path, capsys):
        path = tmp_path / "broken.json"
        path.write_text("{", encoding="utf-8")

        assert main([str(path)]) == 1
        assert "not valid JSON" in capsys.readouterr().err

    @pytest.mark.parametrize("content, message", [
        ("{", "Invalid config"),
        ("[1, 2]", "must be a JSON object"),
        ('{"TILE_SIZE": 0}', "tile_size"),
    ])
    def test_bad_user_config_returns_error(self, descriptor_file, tmp_path, capsys, content, message):
        config = tmp_path / "user.json"
        config.write_text(content, encoding="utf-8")

        assert main([str(descriptor_file), "--config", str(config)]) == 1
        assert message in capsys.readouterr().err

    def test_untriangulable_tin_returns_error(self, tmp_path, capsys):
        path = tmp_path / "line.json"
        path.write_text(json.dumps({
            "mapID": "line", "width": 100, "height": 100,
            "url": "https://example.com/line/{z}/{x}/{y}.jpg",
            "compiled": {"points": [[[0, 0], [0, 0]], [[5, 5], [10, -10]], [[10, 10], [20, -20]]]},
        }), encoding="utf-8")

        assert main([str(path)]) == 1
        assert "cannot be triangulated" in capsys.readouterr().err

    def test_missing_file_returns_error(self, tmp_path):
        assert main([str(tmp_path / "missing.json")]) == 1

    def test_log_file(self, descriptor_file, tmp_path, capsys):
        log_file = tmp_path / "logs" / "inspect.log"
        assert main([str(descriptor_file), "--log-file", str(log_file), "-v"]) == 0

        for handler in logging.getLogger().handlers:
            handler.flush()
        assert "Built source demo" in log_file.read_text()
