"""
Root conftest.py - Global configuration for all test layers.

Test Layers:
    - unit/       : Unit tests (pure functions, no I/O)
    - contracts/  : Test data factories
"""
import os
import sys

# Add project root to path
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, PROJECT_ROOT)

# Load deployment/environments/test.env rather than the dev defaults
os.environ.setdefault("ENV", "test")


# =============================================================================
# Markers
# =============================================================================

def pytest_configure(config):
    """Configure pytest with custom markers"""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "golden: Characterization tests - DO NOT MODIFY")
