import os
import sys
from pathlib import Path

import pytest
from hypothesis import settings, Verbosity

PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

settings.register_profile("fast", max_examples=50)
settings.register_profile("thorough", max_examples=1000)
settings.register_profile("debug", max_examples=10, verbosity=Verbosity.verbose)
settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "fast"))


@pytest.fixture()
def sample():
    """The 12-bit sequence ``101000111001``."""
    from bitvalue import BitValue

    return BitValue(0b101000111001, 12)
