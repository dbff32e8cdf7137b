import json

import pytest

from routemap.cli import main
from routemap.storage import MARKERS_KEY, JsonFileStorage, PersistenceBridge


@pytest.fixture
def storage_path(tmp_path):
    return str(tmp_path / "storage.json")


def _saved(path):
    return PersistenceBridge(JsonFileStorage(path)).load()


def test_add_list_remove_clear(storage_path, capsys):
    main(["--storage", storage_path, "add", "35.681236", "139.767125"])
    main(["--storage", storage_path, "add", "35.690", "139.780", "--label", "目的地"])
    assert _saved(storage_path) == [(35.681236, 139.767125), (35.690, 139.780)]
    out = capsys.readouterr().out
    assert "経路距離: 1.52 km" in out

    main(["--storage", storage_path, "list"])
    out = capsys.readouterr().out
    assert "35.681236,139.767125" in out
    assert "経路距離: 1.52 km" in out

    main(["--storage", storage_path, "remove", "1"])
    assert _saved(storage_path) == [(35.690, 139.780)]
    out = capsys.readouterr().out
    assert "no route" in out

    main(["--storage", storage_path, "clear"])
    assert _saved(storage_path) == []
    assert "Removed 1 marker(s)" in capsys.readouterr().out


def test_list_does_not_write(storage_path):
    main(["--storage", storage_path, "list"])
    assert JsonFileStorage(storage_path).get_item(MARKERS_KEY) is None


def test_remove_out_of_range(storage_path):
    main(["--storage", storage_path, "add", "35.0", "139.0"])
    with pytest.raises(SystemExit):
        main(["--storage", storage_path, "remove", "2"])


def test_add_rejects_bad_coordinate(storage_path):
    with pytest.raises(SystemExit):
        main(["--storage", storage_path, "add", "95.0", "139.0"])


def test_build_with_position(tmp_path, storage_path, capsys):
    out = tmp_path / "map.html"
    main(["--storage", storage_path, "add", "35.690", "139.780"])
    capsys.readouterr()

    main([
        "--storage", storage_path,
        "build", "--out", str(out),
        "--position", "35.681236", "139.767125",
        "--no-browser-geolocation",
    ])
    printed = capsys.readouterr().out
    assert f"Wrote: {out}" in printed
    assert "Markers: 2" in printed
    assert "Centre: 35.681236,139.767125" in printed

    html = out.read_text(encoding="utf-8")
    assert '"geolocation": false' in html
    assert "現在地" in html
    # the position marker is persisted like any other add
    assert _saved(storage_path) == [(35.690, 139.780), (35.681236, 139.767125)]


def test_build_with_config_and_data_files(tmp_path, storage_path):
    cfg = tmp_path / "config.json"
    cfg.write_text(json.dumps({"center": [34.70, 135.50], "zoom": 11}), encoding="utf-8")
    stations = tmp_path / "stations.csv"
    stations.write_text("lat,lon,name,type\n34.7025,135.4959,大阪駅,japan_rail\n", encoding="utf-8")
    roads = tmp_path / "roads.geojson"
    roads.write_text(json.dumps({
        "type": "FeatureCollection",
        "features": [{
            "type": "Feature",
            "properties": {"type": "toll"},
            "geometry": {"type": "LineString", "coordinates": [[135.49, 34.70], [135.50, 34.71]]},
        }],
    }), encoding="utf-8")
    out = tmp_path / "osaka.html"

    main([
        "--config", str(cfg), "--storage", storage_path,
        "build", "--out", str(out), "--roads", str(roads), "--stations", str(stations),
    ])
    html = out.read_text(encoding="utf-8")
    assert "大阪駅" in html
    assert "東京駅" not in html
    assert '"purple"' in html
    assert "34.7" in html


def test_missing_config_file(storage_path):
    with pytest.raises(FileNotFoundError):
        main(["--config", "/nonexistent/routemap.json", "--storage", storage_path, "list"])
