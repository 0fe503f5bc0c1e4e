"""Conftest for unit tests - every test collected below tests/unit is a unit test."""

from pathlib import Path

import pytest


UNIT_ROOT = Path(__file__).resolve().parent


def pytest_collection_modifyitems(config, items):
    for item in items:
        if UNIT_ROOT in Path(str(item.fspath)).resolve().parents:
            item.add_marker(pytest.mark.unit)
