from __future__ import annotations

from pathlib import Path
from datetime import date

import pytest

from hw2c_core.curves import ACT_360, FlatForward, HW2CModel
from hw2c_core.model import euribor


@pytest.fixture(scope="session")
def repo_root() -> Path:
    return Path(__file__).resolve().parents[1]


@pytest.fixture(scope="session")
def asof_date() -> date:
    # Tuesday; keeps every schedule in the suite deterministic
    return date(2022, 11, 15)


@pytest.fixture(scope="session")
def discount_curve(asof_date: date) -> FlatForward:
    return FlatForward(asof_date, 0.05, ACT_360)


@pytest.fixture(scope="session")
def forward_curve(asof_date: date) -> FlatForward:
    return FlatForward(asof_date, 0.03, ACT_360)


@pytest.fixture(scope="session")
def nominal() -> float:
    return 10_000.0


@pytest.fixture
def model(discount_curve: FlatForward, forward_curve: FlatForward) -> HW2CModel:
    # function scoped: calibration tests move the parameters
    return HW2CModel(discount_curve, forward_curve, a=0.1, sigma=0.01)


@pytest.fixture
def euribor3m(forward_curve: FlatForward):
    return euribor("3M", forward_curve)


@pytest.fixture
def euribor6m(forward_curve: FlatForward):
    return euribor("6M", forward_curve)
