import numpy as np
import pytest

from dsgesolve import (
    ConfigurationError,
    TransitionLaw,
    blend_policies,
    blend_temporary_window,
    solve_regime,
    splice_temporary_window,
    validate_weights,
)


def test_full_weight_on_first_candidate_reproduces_it(taylor, hawk) -> None:
    own = solve_regime(taylor)
    alt = solve_regime(hawk)
    blended = blend_policies([own, alt], [1.0, 0.0], taylor)
    assert blended.allclose(own, atol=1e-10)


def test_full_weight_on_last_candidate_reproduces_it(taylor, hawk) -> None:
    own = solve_regime(taylor)
    alt = solve_regime(hawk)
    blended = blend_policies([alt, own], [0.0, 1.0], taylor)
    assert blended.allclose(own, atol=1e-10)


def test_weights_summing_to_point_nine_are_rejected(taylor, hawk) -> None:
    laws = [solve_regime(taylor), solve_regime(hawk)]
    with pytest.raises(ConfigurationError, match="sum to 1"):
        blend_policies(laws, [0.6, 0.3], taylor)


def test_weight_count_must_match_candidates(taylor) -> None:
    own = solve_regime(taylor)
    with pytest.raises(ConfigurationError):
        blend_policies([own, own], [1.0], taylor)


def test_negative_weights_are_rejected() -> None:
    with pytest.raises(ConfigurationError):
        validate_weights([1.2, -0.2], 2)


def test_weights_within_tolerance_are_accepted() -> None:
    w = validate_weights([0.5, 0.5 + 5e-9], 2)
    assert w.shape == (2,)


def test_blend_is_one_step_on_the_averaged_law(taylor, hawk) -> None:
    own = solve_regime(taylor)
    alt = solve_regime(hawk)
    w = [0.7, 0.3]
    expected = taylor.predictable_form().step(TransitionLaw.weighted([own, alt], w))
    assert blend_policies([own, alt], w, taylor).allclose(expected, atol=1e-12)


def test_interior_blend_differs_from_both_candidates(taylor, hawk) -> None:
    own = solve_regime(taylor)
    alt = solve_regime(hawk)
    blended = blend_policies([own, alt], [0.5, 0.5], taylor)
    assert not blended.allclose(own)
    assert not blended.allclose(alt)


def test_uncertain_window_with_no_doubt_is_the_plain_splice(peg, taylor, hawk) -> None:
    terminal = solve_regime(taylor)
    alt = solve_regime(hawk)
    plain = splice_temporary_window([peg] * 4, terminal)
    certain = blend_temporary_window([peg] * 4, terminal, [alt], [1.0, 0.0])
    assert len(certain) == len(plain)
    for a, b in zip(certain, plain):
        assert a.allclose(b, atol=1e-12)


def test_uncertain_window_threads_the_blend_backward(peg, taylor, hawk) -> None:
    terminal = solve_regime(taylor)
    alt = solve_regime(hawk)
    weights = [[0.9, 0.1], [0.8, 0.2], [0.7, 0.3]]
    laws = blend_temporary_window([peg] * 3, terminal, [alt], weights, regimes=[2, 3, 4])

    last = blend_policies([terminal, alt], weights[2], peg)
    assert laws[2].allclose(last, atol=1e-12)
    middle = blend_policies([laws[2], alt], weights[1], peg)
    assert laws[1].allclose(middle, atol=1e-12)
    assert laws[-1] is terminal


def test_uncertain_window_checks_per_period_weights(peg, taylor, hawk) -> None:
    terminal = solve_regime(taylor)
    alt = solve_regime(hawk)
    with pytest.raises(ConfigurationError) as excinfo:
        blend_temporary_window([peg] * 2, terminal, [alt], [[0.5, 0.5], [0.5, 0.6]], regimes=[2, 3])
    assert excinfo.value.regime == 3

    with pytest.raises(ConfigurationError):
        blend_temporary_window([peg] * 2, terminal, [alt], [[0.5, 0.5]] * 3)


def test_weighted_law_rejects_mismatched_sizes(taylor) -> None:
    own = solve_regime(taylor)
    small = TransitionLaw(np.eye(2), np.ones((2, 1)), np.zeros(2))
    with pytest.raises(ConfigurationError):
        TransitionLaw.weighted([own, small], [0.5, 0.5])
