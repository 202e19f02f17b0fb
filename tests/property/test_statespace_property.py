import numpy as np
import pytest

pytest.importorskip("hypothesis")

from hypothesis import given, settings
from hypothesis import strategies as st

from dsgesolve import expected_average_transition


@settings(max_examples=30, deadline=None)
@given(
    n=st.integers(min_value=1, max_value=5),
    horizon=st.integers(min_value=1, max_value=80),
    seed=st.integers(min_value=0, max_value=10_000),
)
def test_doubling_sum_matches_direct_sum(n: int, horizon: int, seed: int) -> None:
    rng = np.random.default_rng(seed)
    T = rng.normal(size=(n, n))
    T *= 0.95 / max(np.max(np.abs(np.linalg.eigvals(T))), 1e-12)

    total = np.zeros((n, n))
    P = np.eye(n)
    for _ in range(horizon):
        P = P @ T
        total += P

    np.testing.assert_allclose(expected_average_transition(T, horizon), total / horizon,
                               rtol=1e-9, atol=1e-12)
