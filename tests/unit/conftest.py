"""
Unit Test Layer Configuration

Structure:
    tests/unit/
    ├── golden/      🔒 Characterization (never modify)
    └── pricing/     Pricing engine logic

Usage:
    pytest tests/unit -v                 # All unit tests
    pytest tests/unit/golden -v          # Only golden tests
    pytest tests/unit -m golden -v       # By marker
"""
import os
import sys

import pytest

# Add project root
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))


def pytest_collection_modifyitems(config, items):
    """Every test under tests/unit is a unit test"""
    for item in items:
        if "tests/unit" in str(item.fspath).replace(os.sep, "/"):
            item.add_marker(pytest.mark.unit)
