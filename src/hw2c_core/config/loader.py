from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import pandas as pd
import yaml

from hw2c_core.calibration.calibrate import EndCriteria
from hw2c_core.calibration.swaption_helper import CalibrationErrorType
from hw2c_core.curves.daycount import DayCounter, get_day_counter
from hw2c_core.curves.hw2c_model import HW2CModel
from hw2c_core.curves.types import FlatForward, YieldTermStructure, ZeroCurve


# ---------- Curves ----------

@dataclass
class CurveSpec:
    """
    One term structure, given in exactly one of three ways:

    - flat_rate: continuously compounded flat rate (e.g. 0.05)
    - points:    [[tenor_years, zero_rate], ...]
    - file:      parquet / xlsx / csv table with tenor_years, zero_rate columns
    """
    flat_rate: Optional[float] = None
    points: Optional[List[Tuple[float, float]]] = None
    file: Optional[Path] = None
    sheet: Optional[str] = None

    def __post_init__(self) -> None:
        given = [x is not None for x in (self.flat_rate, self.points, self.file)]
        if sum(given) != 1:
            raise ValueError(
                "curve spec needs exactly one of 'flat_rate', 'points' or 'file'"
            )

    def load_points(self) -> List[Tuple[float, float]]:
        if self.points is not None:
            return [(float(t), float(r)) for t, r in self.points]
        if self.file is None:
            raise ValueError("curve spec has no points to load")

        suffix = self.file.suffix.lower()
        if suffix == ".parquet":
            df = pd.read_parquet(self.file)
        elif suffix in (".xlsx", ".xls"):
            df = pd.read_excel(self.file, sheet_name=self.sheet or 0)
        else:
            df = pd.read_csv(self.file)

        missing = {"tenor_years", "zero_rate"} - set(df.columns)
        if missing:
            raise KeyError(f"{self.file}: missing curve columns {sorted(missing)}")
        return list(zip(df["tenor_years"].astype(float), df["zero_rate"].astype(float)))

    def build(self, reference_date: date, day_counter: DayCounter) -> YieldTermStructure:
        if self.flat_rate is not None:
            return FlatForward(reference_date, float(self.flat_rate), day_counter)
        return ZeroCurve.from_pairs(reference_date, day_counter, self.load_points())


@dataclass
class CurvesConfig:
    reference_date: date
    day_counter: str
    discount: CurveSpec
    forward: CurveSpec


# ---------- Model / engine / calibration ----------

@dataclass
class ModelConfig:
    a: float = 0.1
    sigma: float = 0.01


@dataclass
class EngineConfig:
    time_steps: int = 40
    min_steps_per_year: int = 4


@dataclass
class CalibrationConfig:
    max_iterations: int = 400
    root_epsilon: float = 1e-8
    function_epsilon: float = 1e-8
    gradient_norm_epsilon: float = 1e-8
    fix_policy: Any = "auto"          # "auto" | "none" | [bool, bool]
    error_type: CalibrationErrorType = CalibrationErrorType.RELATIVE_PRICE_ERROR

    def end_criteria(self) -> EndCriteria:
        return EndCriteria(
            max_iterations=self.max_iterations,
            root_epsilon=self.root_epsilon,
            function_epsilon=self.function_epsilon,
            gradient_norm_epsilon=self.gradient_norm_epsilon,
        )


@dataclass
class AppConfig:
    """
    Top-level configuration object for hw2c_core.

    - curves:      reference date, day counter, discount and forward curves
    - model:       initial Hull-White parameters
    - engine:      lattice step controls
    - calibration: end criteria, fix policy, error type
    - output_root: where exports go (resolved against the repo root)
    """
    curves: CurvesConfig
    model: ModelConfig = field(default_factory=ModelConfig)
    engine: EngineConfig = field(default_factory=EngineConfig)
    calibration: CalibrationConfig = field(default_factory=CalibrationConfig)
    output_root: Path = Path("output")

    # ---------- runtime objects ----------

    @property
    def day_counter(self) -> DayCounter:
        return get_day_counter(self.curves.day_counter)

    def build_curves(self) -> Tuple[YieldTermStructure, YieldTermStructure]:
        """(discount_curve, forward_curve) sharing reference date and day counter."""
        ref = self.curves.reference_date
        dc = self.day_counter
        return self.curves.discount.build(ref, dc), self.curves.forward.build(ref, dc)

    def build_model(self) -> HW2CModel:
        discount_curve, forward_curve = self.build_curves()
        return HW2CModel(discount_curve, forward_curve, a=self.model.a, sigma=self.model.sigma)

    # ---------- path helpers ----------

    @property
    def dated_output_root(self) -> Path:
        """
        Output folder for this run, partitioned by curve reference date:

            <output_root>/hw2c/YYYY-MM-DD
        """
        out = self.output_root / "hw2c" / self.curves.reference_date.isoformat()
        out.mkdir(parents=True, exist_ok=True)
        return out

    # ---------- constructors ----------

    @classmethod
    def from_yaml(cls, cfg_path: Path) -> "AppConfig":
        """
        Load configuration from a YAML file.

        Paths in the YAML are interpreted as relative to the repo root.
        We assume this file lives in: <repo root>/config/example_config.yaml
        """
        cfg_path = Path(cfg_path)
        text = cfg_path.read_text(encoding="utf-8")
        data: Dict[str, Any] = yaml.safe_load(text) or {}

        # repo root ~ parent of the "config" directory
        repo_root = cfg_path.parent.parent

        def resolve_path(p: str) -> Path:
            path = Path(p)
            if not path.is_absolute():
                path = repo_root / path
            return path.resolve()

        # ----- Curves -----
        curves_data: Dict[str, Any] = data.get("curves", {}) or {}
        if "reference_date" not in curves_data:
            raise ValueError(f"{cfg_path}: curves.reference_date is required")

        def curve_spec(key: str) -> CurveSpec:
            raw: Dict[str, Any] = curves_data.get(key, {}) or {}
            file_raw = raw.get("file")
            return CurveSpec(
                flat_rate=raw.get("flat_rate"),
                points=raw.get("points"),
                file=resolve_path(file_raw) if file_raw else None,
                sheet=raw.get("sheet"),
            )

        curves_cfg = CurvesConfig(
            reference_date=pd.to_datetime(str(curves_data["reference_date"])).date(),
            day_counter=str(curves_data.get("day_counter", "ACT/360")),
            discount=curve_spec("discount"),
            forward=curve_spec("forward"),
        )

        # ----- Model -----
        model_data: Dict[str, Any] = data.get("model", {}) or {}
        model_cfg = ModelConfig(
            a=float(model_data.get("a", 0.1)),
            sigma=float(model_data.get("sigma", 0.01)),
        )

        # ----- Engine -----
        engine_data: Dict[str, Any] = data.get("engine", {}) or {}
        engine_cfg = EngineConfig(
            time_steps=int(engine_data.get("time_steps", 40)),
            min_steps_per_year=int(engine_data.get("min_steps_per_year", 4)),
        )

        # ----- Calibration -----
        cal_data: Dict[str, Any] = data.get("calibration", {}) or {}
        cal_cfg = CalibrationConfig(
            max_iterations=int(cal_data.get("max_iterations", 400)),
            root_epsilon=float(cal_data.get("root_epsilon", 1e-8)),
            function_epsilon=float(cal_data.get("function_epsilon", 1e-8)),
            gradient_norm_epsilon=float(cal_data.get("gradient_norm_epsilon", 1e-8)),
            fix_policy=cal_data.get("fix_policy", "auto"),
            error_type=CalibrationErrorType[
                str(cal_data.get("error_type", "RELATIVE_PRICE_ERROR")).upper()
            ],
        )

        # ----- Output -----
        out_data: Dict[str, Any] = data.get("output", {}) or {}
        output_root = resolve_path(out_data.get("output_root", "output"))

        return cls(
            curves=curves_cfg,
            model=model_cfg,
            engine=engine_cfg,
            calibration=cal_cfg,
            output_root=output_root,
        )
