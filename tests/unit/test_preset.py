from pathlib import Path

import numpy as np
import pytest

from conftest import PRESET_DIR
from dsgesolve import ConfigurationError, Scenario, impulse_response, load_preset


@pytest.fixture(scope="module")
def zlb() -> Scenario:
    return Scenario.from_preset(str(PRESET_DIR / "nk_temporary_zlb.yaml"))


def test_preset_lookup_by_name_and_path() -> None:
    by_name = load_preset("nk_temporary_zlb")
    by_path = load_preset(str(PRESET_DIR / "nk_temporary_zlb.yaml"))
    assert by_name == by_path
    with pytest.raises(ConfigurationError, match="not found"):
        load_preset("no_such_preset")


def test_scenario_wiring(zlb: Scenario) -> None:
    assert zlb.name == "nk_temporary_zlb"
    assert zlb.regime_config.recursion_regimes == [2, 3, 4, 5]
    assert zlb.regime_config.terminal_regime == 6
    assert zlb.state_names[-2:] == ["i_lag", "pi_cum"]


def test_peg_holds_during_window(zlb: Scenario) -> None:
    sol = zlb.solve()
    irf = impulse_response(sol.laws[1:], "eps_u", horizon=8,
                           state_names=zlb.state_names, shock_names=zlb.model.shock_names)
    np.testing.assert_allclose(irf["i"].iloc[:4], 0.0, atol=1e-12)
    assert abs(irf["i"].iloc[4]) > 1e-6
    np.testing.assert_allclose(irf["i_lag"].iloc[1:].to_numpy(), irf["i"].iloc[:-1].to_numpy(), atol=1e-12)
    np.testing.assert_allclose(irf["pi_cum"].to_numpy(), np.cumsum(irf["pi"].to_numpy()), atol=1e-12)


def test_uncertain_liftoff_differs_from_known_liftoff(zlb: Scenario) -> None:
    uncertain = Scenario.from_preset("nk_uncertain_liftoff")
    assert uncertain.policy_config.uncertain_window
    a = zlb.solve()
    b = uncertain.solve()
    assert a[6].allclose(b[6])
    assert not a[2].allclose(b[2])


def test_unknown_augment_state_is_rejected() -> None:
    data = load_preset("nk_temporary_zlb")
    data["augment"] = {"lags": ["y"]}
    with pytest.raises(ConfigurationError, match="augment"):
        Scenario.from_dict(data)


def test_missing_model_section() -> None:
    with pytest.raises(ConfigurationError):
        Scenario.from_dict({"regimes": {"n_regimes": 2}})


def test_bundled_presets_ship_inside_the_package(tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:
    import dsgesolve.preset as preset_module

    package_dir = Path(preset_module.__file__).resolve().parent
    assert Path(preset_module.PRESET_DIR).resolve() == package_dir / "presets"

    monkeypatch.chdir(tmp_path)
    assert load_preset("nk_uncertain_liftoff")["policy"]["uncertain_window"] is True
