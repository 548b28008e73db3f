"""
Pytest fixtures for vlga tests.
"""
import random

import pytest

from vlga.candidate import Candidate

# D5 B4 D4 G2 -> C5 G4 E4 C3
V_I_GENES = [22, 20, 15, 4, 21, 18, 16, 7]
# F5 B4 D4 G2 -> E5 C5 C4 C3
V7_I_GENES = [24, 20, 15, 4, 23, 21, 14, 7]


@pytest.fixture
def rng():
    """Seeded random source."""
    return random.Random(1234)


@pytest.fixture
def v_i():
    """SATB authentic cadence in root position; only the two leaps cost anything."""
    return Candidate(V_I_GENES, "SATB")


@pytest.fixture
def v7_i():
    """SATB dominant seventh resolving to a tonic chord with the third on top."""
    return Candidate(V7_I_GENES, "SATB")
