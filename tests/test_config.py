import pytest

from utils.config import PipelineConfig, config_from_dict, load_config


def test_load_config_from_yaml(tmp_path):
    path = tmp_path / "pipeline.yaml"
    path.write_text(
        "anchor_market: Lilongwe\n"
        "relative_mode: difference\n"
        "resolution: 0.25\n"
        "estimators:\n"
        "  - method: idw\n"
        "    idw_power: 3\n"
        "  - method: RandomForest\n"
        "    forest_trees: 50\n"
    )
    cfg = load_config(path)

    assert cfg.anchor_market == "Lilongwe"
    assert cfg.relative_mode == "difference"
    assert cfg.decomposition_model == "additive"
    assert cfg.resolution == 0.25
    assert [e.method for e in cfg.estimators] == ["idw", "rf"]
    assert cfg.estimators[0].idw_power == 3
    assert cfg.estimators[1].forest_trees == 50


def test_default_estimators():
    cfg = PipelineConfig(anchor_market="Lilongwe")
    assert [e.method for e in cfg.estimators] == ["tps", "idw", "rf"]


def test_anchor_is_required():
    with pytest.raises(ValueError, match="anchor_market"):
        config_from_dict({"relative_mode": "ratio"})
    with pytest.raises(ValueError):
        PipelineConfig(anchor_market=" ")


@pytest.mark.parametrize(
    "override",
    [
        {"relative_mode": "log"},
        {"decomposition_model": "stl"},
        {"max_workers": 0},
        {"resolution": 0},
        {"estimators": []},
        {"colour": "blue"},
    ],
)
def test_invalid_settings(override):
    with pytest.raises(ValueError):
        config_from_dict({"anchor_market": "Lilongwe", **override})


def test_missing_config_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "missing.yaml")
