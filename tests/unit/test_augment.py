import numpy as np
import pytest

from dsgesolve import ConfigurationError, StateAugmentation, TransitionLaw, identity_augmentor


def _law() -> TransitionLaw:
    T = np.array([[0.5, 0.1], [0.0, 0.9]])
    R = np.array([[1.0], [0.5]])
    C = np.array([0.2, -0.1])
    return TransitionLaw(T, R, C)


def test_identity_augmentor_returns_law_unchanged() -> None:
    law = _law()
    assert identity_augmentor(law, 3) is law


def test_lag_states_copy_last_period() -> None:
    law = StateAugmentation(lags=[1])(_law(), 1)
    assert law.n_states == 3
    np.testing.assert_allclose(law.T[2], [0.0, 1.0, 0.0])
    np.testing.assert_allclose(law.R[2], [0.0])
    assert law.C[2] == 0.0


def test_cumulative_states_add_current_value() -> None:
    base = _law()
    law = StateAugmentation(cumulative=[0])(base, 1)
    np.testing.assert_allclose(law.T[2], [0.5, 0.1, 1.0])
    np.testing.assert_allclose(law.R[2], base.R[0])
    assert law.C[2] == pytest.approx(base.C[0])

    # running sum after two periods of the base process from zero
    s = np.zeros(3)
    eps = np.array([1.0])
    s1 = law.T @ s + law.R @ eps + law.C
    s2 = law.T @ s1 + law.C
    assert s2[2] == pytest.approx(s1[0] + s2[0])


def test_base_block_is_untouched() -> None:
    base = _law()
    law = StateAugmentation(lags=[0, 1], cumulative=[1])(base, 1)
    np.testing.assert_allclose(law.T[:2, :2], base.T)
    np.testing.assert_allclose(law.T[:2, 2:], 0.0)
    np.testing.assert_allclose(law.R[:2], base.R)


def test_out_of_range_state_is_rejected() -> None:
    with pytest.raises(ConfigurationError):
        StateAugmentation(lags=[5])(_law(), 2)
