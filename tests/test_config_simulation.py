"""
Tests for the YAML configuration and the single-shot simulation driver.
"""

import numpy as np
import pytest
import yaml

from fwiprop.config import SimulationConfig
from fwiprop.modeling import ConfigError, DomainError, StabilityError
from fwiprop.simulation import build_model, build_time_axis, run_from_file, run_shot


def small_config(**overrides):
    """A configuration small enough to run in a fraction of a second."""
    data = {
        "grid": {"shape": [31, 31], "spacing": [10.0, 10.0], "nbl": 10},
        "model": {"type": "constant", "vp": 2.0},
        "source": {"coordinates": [[150.0, 50.0]], "f0": 0.015},
        "receivers": {"start": [0.0, 250.0], "end": [300.0, 250.0], "npoint": 31},
        "propagation": {"tn": 200.0, "dt": "critical", "space_order": 2},
    }
    for section, values in overrides.items():
        data[section].update(values)
    # end for
    return data
# end def small_config


def write_config(path, data):
    with open(path, "w") as f:
        yaml.safe_dump(data, f)
    # end with
    return path
# end def write_config


def test_defaults():
    config = SimulationConfig.from_dict(None)
    assert config.grid.shape == (101, 101)
    assert config.grid.nbl == 40
    assert config.model.type == "constant"
    assert config.source.f0 == pytest.approx(0.010)
    assert config.receivers.npoint == 101
    assert config.propagation.dt == "critical"
    assert config.propagation.space_order == 2
# end def test_defaults


@pytest.mark.parametrize(
    "data",
    [
        {"grid": {"shape": [10, 10], "colour": "red"}},
        {"unknown_section": {}},
        {"propagation": {"dt": "fast"}},
        {"propagation": {"dt": -1.0}},
        {"propagation": {"space_order": 3}},
        {"propagation": {"nt": 1}},
        {"model": {"type": "layered"}},
        {"model": {"type": "file"}},
        {"model": {"type": "marble"}},
        {"model": {"vp": 0.0}},
        {"source": {"coordinates": []}},
        {"source": {"interpolation": "cubic"}},
    ],
)
def test_invalid_configuration(data):
    with pytest.raises(ConfigError):
        SimulationConfig.from_dict(data)
    # end with
# end def test_invalid_configuration


def test_numeric_dt():
    config = SimulationConfig.from_dict({"propagation": {"dt": 0.5}})
    assert config.propagation.dt == pytest.approx(0.5)
# end def test_numeric_dt


def test_from_yaml_errors(tmp_path):
    with pytest.raises(FileNotFoundError):
        SimulationConfig.from_yaml(tmp_path / "missing.yaml")
    # end with

    broken = tmp_path / "broken.yaml"
    broken.write_text("grid: [1, 2\n")
    with pytest.raises(ConfigError):
        SimulationConfig.from_yaml(broken)
    # end with

    not_a_mapping = tmp_path / "list.yaml"
    not_a_mapping.write_text("- 1\n- 2\n")
    with pytest.raises(ConfigError):
        SimulationConfig.from_yaml(not_a_mapping)
    # end with

    empty = tmp_path / "empty.yaml"
    empty.write_text("")
    assert SimulationConfig.from_yaml(empty) == SimulationConfig()
# end def test_from_yaml_errors


def test_to_yaml_reloads(tmp_path):
    config = SimulationConfig.from_dict(small_config())
    path = tmp_path / "out" / "config.yaml"
    config.to_yaml(path)
    assert SimulationConfig.from_yaml(path) == config
# end def test_to_yaml_reloads


def test_relative_model_path(tmp_path):
    """A file model is looked up next to the configuration."""
    np.save(tmp_path / "vp.npy", np.full((31, 31), 1.8))
    path = write_config(
        tmp_path / "config.yaml", small_config(model={"type": "file", "path": "vp.npy"})
    )
    config = SimulationConfig.from_yaml(path)
    assert config.model.path == tmp_path / "vp.npy"
    assert build_model(config).max_velocity == pytest.approx(1.8)
# end def test_relative_model_path


def test_file_model_wrong_shape(tmp_path):
    np.save(tmp_path / "vp.npy", np.full((20, 31), 1.8))
    config = SimulationConfig.from_yaml(
        write_config(tmp_path / "config.yaml", small_config(model={"type": "file", "path": "vp.npy"}))
    )
    with pytest.raises(ConfigError):
        build_model(config)
    # end with
# end def test_file_model_wrong_shape


def test_missing_model_file(tmp_path):
    config = SimulationConfig.from_dict(small_config(model={"type": "file", "path": str(tmp_path / "no.npy")}))
    with pytest.raises(FileNotFoundError):
        build_model(config)
    # end with
# end def test_missing_model_file


def test_build_model_types():
    layered = SimulationConfig.from_dict(small_config(model={"type": "layered", "layers": [[10, 1.5], [0, 2.5]]}))
    model = build_model(layered)
    assert model.vp[0, 0] == 1.5
    assert model.vp[0, -1] == 2.5

    circle = SimulationConfig.from_dict(small_config(model={"type": "circle", "radius": 60.0}))
    model = build_model(circle)
    assert model.vp[15, 15] == 3.0

    smoothed = SimulationConfig.from_dict(
        small_config(model={"type": "circle", "radius": 60.0, "smooth": 3.0})
    )
    assert build_model(smoothed).max_velocity < 3.0
# end def test_build_model_types


def test_build_time_axis():
    config = SimulationConfig.from_dict(small_config())
    model = build_model(config)
    time_axis = build_time_axis(config, model)
    assert time_axis.step == pytest.approx(model.critical_dt(2))
    assert time_axis.stop >= 200.0

    fixed = SimulationConfig.from_dict(small_config(propagation={"dt": 1.0, "nt": 50}))
    time_axis = build_time_axis(fixed, model)
    assert time_axis.num == 50
    assert time_axis.step == 1.0
# end def test_build_time_axis


def test_run_shot():
    config = SimulationConfig.from_dict(small_config())
    results = run_shot(config)

    nt = results["time_axis"].num
    assert results["receiver_data"].shape == (nt, 31)
    assert results["wavefield"].shape == (31, 31)
    assert np.max(np.abs(results["receiver_data"])) > 0.0
    assert results["critical_dt"] == pytest.approx(results["model"].critical_dt(2))
# end def test_run_shot


def test_run_shot_rejects_unstable_dt():
    config = SimulationConfig.from_dict(small_config(propagation={"dt": 50.0}))
    with pytest.raises(StabilityError):
        run_shot(config)
    # end with
# end def test_run_shot_rejects_unstable_dt


def test_run_shot_source_outside():
    config = SimulationConfig.from_dict(small_config(source={"coordinates": [[150.0, 5000.0]]}))
    with pytest.raises(DomainError):
        run_shot(config)
    # end with
# end def test_run_shot_source_outside


def test_run_from_file_writes_outputs(tmp_path):
    path = write_config(tmp_path / "config.yaml", small_config(propagation={"save": True}))
    results = run_from_file(path, output_dir=tmp_path / "results", save_wavefield=True, log=True)

    shot_record = np.load(results["files"]["shot_record"])
    np.testing.assert_array_equal(shot_record, results["receiver_data"])
    coordinates = np.load(results["files"]["receivers"])
    assert coordinates.shape == (31, 2)
    wavefield = np.load(results["files"]["wavefield"])
    assert wavefield.shape == (results["time_axis"].num, 31, 31)
    assert results["config"].propagation.save
# end def test_run_from_file_writes_outputs
