# examples/run_hw2c_calibration.py

from __future__ import annotations

import logging
import sys
from pathlib import Path

from hw2c_core.calibration import SwaptionHelper, calibrate_hw2c_model
from hw2c_core.config import AppConfig
from hw2c_core.errors import DidNotConvergeError
from hw2c_core.model import euribor
from hw2c_core.pricing import HW2CTreeSwaptionEngine

# (option tenor, swap tenor, lognormal vol)
QUOTES = [
    ("1Y", "5Y", 0.22),
    ("2Y", "5Y", 0.21),
    ("3Y", "5Y", 0.20),
    ("5Y", "5Y", 0.19),
]


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    repo_root = Path(__file__).resolve().parents[1]
    app_cfg = AppConfig.from_yaml(repo_root / "config" / "example_config.yaml")
    discount_curve, forward_curve = app_cfg.build_curves()
    model = app_cfg.build_model()
    cal_cfg = app_cfg.calibration

    index = euribor("6M", forward_curve)
    helpers = [
        SwaptionHelper(o, s, vol, index, discount_curve, error_type=cal_cfg.error_type)
        for o, s, vol in QUOTES
    ]

    print(f"[INFO] Calibrating {model} to {len(helpers)} swaptions")
    try:
        result = calibrate_hw2c_model(
            model,
            helpers,
            app_cfg.engine.time_steps,
            end_criteria=cal_cfg.end_criteria(),
            fix_policy=cal_cfg.fix_policy,
        )
    except DidNotConvergeError as e:
        print(f"[ERROR] {e}")
        if e.result is not None:
            print(e.result.to_frame().to_string(index=False))
        sys.exit(1)

    print(f"[OK] a={result.a:.6f} sigma={result.sigma:.6f} rmse={result.rmse:.3e}")
    print(result.to_frame().to_string(index=False))

    # price every helper's swaption on the calibrated model
    engine = HW2CTreeSwaptionEngine(model, app_cfg.engine.time_steps)
    for h in helpers:
        h.swaption.set_pricing_engine(engine)
        print(f"  {h!r}: tree={h.swaption.npv():.8f} black={h.market_value():.8f}")

    out_path = app_cfg.dated_output_root / "hw2c_calibration.xlsx"
    result.to_frame().to_excel(out_path, index=False)
    print(f"[OK] Wrote {out_path}")


if __name__ == "__main__":
    main()
