# examples/run_hw2c_swap.py

from __future__ import annotations

import logging
from pathlib import Path

import pandas as pd

from hw2c_core.calls import bermudan_exercise_from_fixed_leg
from hw2c_core.config import AppConfig
from hw2c_core.curves import TimeGrid, add_months, adjust
from hw2c_core.model import Swaption, euribor, make_vanilla_swap
from hw2c_core.pricing import (
    DiscountingSwapEngine,
    HW2CDiscretizedSwap,
    HW2CTreeSwapEngine,
    HW2CTreeSwaptionEngine,
)


def find_repo_root() -> Path:
    """
    Resolve the repo root assuming this file lives in <repo>/examples/>.
    """
    return Path(__file__).resolve().parents[1]


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    repo_root = find_repo_root()
    cfg_path = repo_root / "config" / "example_config.yaml"
    print(f"[INFO] Using config file: {cfg_path}")

    app_cfg = AppConfig.from_yaml(cfg_path)
    discount_curve, forward_curve = app_cfg.build_curves()
    model = app_cfg.build_model()
    ref = app_cfg.curves.reference_date
    steps = app_cfg.engine.time_steps
    print(f"[INFO] Reference date {ref}, {model}")

    # ------------------------------------------------------------------
    # 1) 10Y payer swap: discounting vs lattice
    # ------------------------------------------------------------------
    index = euribor("3M", forward_curve)
    swap = make_vanilla_swap("10Y", index, 0.04, ref, nominal=10_000.0)

    swap.set_pricing_engine(DiscountingSwapEngine(discount_curve, forward_curve))
    disc_npv = swap.npv()
    swap.set_pricing_engine(HW2CTreeSwapEngine(model, steps))
    tree_npv = swap.npv()

    print("\n=== 10Y payer swap vs Euribor 3M ===")
    print(f"Discounting NPV : {disc_npv:,.6f}")
    print(f"HW2C tree NPV   : {tree_npv:,.6f}")
    print(f"Difference      : {tree_npv - disc_npv:.3e}")

    # ------------------------------------------------------------------
    # 2) Bermudan on a forward-starting 5Y swap
    # ------------------------------------------------------------------
    index_6m = euribor("6M", forward_curve)
    fwd_swap = make_vanilla_swap(
        "5Y",
        index_6m,
        0.035,
        ref,
        nominal=10_000.0,
        effective_date=adjust(add_months(ref, 12)),
    )
    bermudan = Swaption(fwd_swap, bermudan_exercise_from_fixed_leg(fwd_swap))
    bermudan.set_pricing_engine(HW2CTreeSwaptionEngine(model, steps))

    print("\n=== 1Y x 5Y Bermudan payer, strike 3.50% ===")
    print(f"Exercise dates  : {[d.isoformat() for d in bermudan.exercise.dates]}")
    print(f"HW2C tree NPV   : {bermudan.npv():,.6f}")

    # ------------------------------------------------------------------
    # 3) Export the swap cash flows and the lattices used to price it
    # ------------------------------------------------------------------
    grid_times = HW2CDiscretizedSwap(
        swap.arguments(), ref, discount_curve.day_counter
    ).mandatory_times()
    grid = TimeGrid(grid_times, steps)
    out_dir = app_cfg.dated_output_root
    cf_path = out_dir / "hw2c_swap_10y_cashflows.xlsx"
    with pd.ExcelWriter(cf_path) as xw:
        swap.cashflows_frame().to_excel(xw, sheet_name="COUPONS", index=False)
        DiscountingSwapEngine(discount_curve, forward_curve).cashflow_table(
            swap.arguments()
        ).to_excel(xw, sheet_name="DISCOUNTED", index=False)
    print(f"[OK] Wrote {cf_path}")

    model.export_lattices(grid, out_dir, tag="swap_10y")


if __name__ == "__main__":
    main()
