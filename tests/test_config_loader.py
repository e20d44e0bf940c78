# tests/test_config_loader.py

from __future__ import annotations

from datetime import date
from pathlib import Path

import pandas as pd
import pytest

from hw2c_core.calibration import CalibrationErrorType
from hw2c_core.config import AppConfig, CurveSpec
from hw2c_core.curves import ACT_360, FlatForward, ZeroCurve

YAML_TEXT = """
curves:
  reference_date: "2022-11-15"
  day_counter: "ACT/360"
  discount:
    flat_rate: 0.05
  forward:
    file: "data/forward_curve.csv"

model:
  a: 0.05
  sigma: 0.012

engine:
  time_steps: 60

calibration:
  max_iterations: 50
  fix_policy: [true, false]
  error_type: "price_error"

output:
  output_root: "out"
"""


@pytest.fixture
def tmp_repo(tmp_path: Path) -> Path:
    (tmp_path / "config").mkdir()
    (tmp_path / "data").mkdir()
    (tmp_path / "config" / "hw2c.yaml").write_text(YAML_TEXT, encoding="utf-8")
    pd.DataFrame(
        {"tenor_years": [0.25, 1.0, 10.0], "zero_rate": [0.029, 0.030, 0.032]}
    ).to_csv(tmp_path / "data" / "forward_curve.csv", index=False)
    return tmp_path


def test_from_yaml_resolves_paths_against_repo_root(tmp_repo):
    cfg = AppConfig.from_yaml(tmp_repo / "config" / "hw2c.yaml")

    assert cfg.curves.reference_date == date(2022, 11, 15)
    assert cfg.day_counter is ACT_360
    assert cfg.curves.forward.file == (tmp_repo / "data" / "forward_curve.csv").resolve()
    assert cfg.output_root == (tmp_repo / "out").resolve()

    assert (cfg.model.a, cfg.model.sigma) == (0.05, 0.012)
    assert cfg.engine.time_steps == 60
    assert cfg.engine.min_steps_per_year == 4
    assert cfg.calibration.fix_policy == [True, False]
    assert cfg.calibration.error_type is CalibrationErrorType.PRICE_ERROR
    assert cfg.calibration.end_criteria().max_iterations == 50


def test_build_model(tmp_repo):
    cfg = AppConfig.from_yaml(tmp_repo / "config" / "hw2c.yaml")
    discount, forward = cfg.build_curves()
    assert isinstance(discount, FlatForward)
    assert isinstance(forward, ZeroCurve)
    assert forward.zero_rate(5.5) == pytest.approx(0.031)

    model = cfg.build_model()
    assert (model.a, model.sigma) == (0.05, 0.012)
    assert model.forward_curve.reference_date == date(2022, 11, 15)


def test_dated_output_root(tmp_repo):
    cfg = AppConfig.from_yaml(tmp_repo / "config" / "hw2c.yaml")
    out = cfg.dated_output_root
    assert out == cfg.output_root / "hw2c" / "2022-11-15"
    assert out.is_dir()


def test_reference_date_is_required(tmp_path):
    (tmp_path / "config").mkdir()
    cfg_path = tmp_path / "config" / "broken.yaml"
    cfg_path.write_text("curves:\n  discount:\n    flat_rate: 0.05\n", encoding="utf-8")
    with pytest.raises(ValueError):
        AppConfig.from_yaml(cfg_path)


def test_curve_spec_needs_exactly_one_source():
    with pytest.raises(ValueError):
        CurveSpec()
    with pytest.raises(ValueError):
        CurveSpec(flat_rate=0.05, points=[(1.0, 0.05)])


def test_example_config_loads(repo_root):
    cfg = AppConfig.from_yaml(repo_root / "config" / "example_config.yaml")
    model = cfg.build_model()
    assert model.discount_curve.discount(0.0) == 1.0
    assert cfg.engine.time_steps == 40
    assert cfg.calibration.fix_policy == "auto"
