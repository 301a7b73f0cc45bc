import pytest

from pompkit.model import GillespieProcess, Model, ProcessType
from pompkit.userdata import UserData


def _model(order="linear"):
    return Model(
        covar={"temp": [2.0, 6.0, 4.0], "rain": [1.0, 1.0, 3.0]},
        covar_times=[0.0, 1.0, 2.0],
        covar_order=order,
    )


def test_covariates_at_knots_are_exact():
    m = _model()
    assert m.covariates_at(1.0) == {"temp": 6.0, "rain": 1.0}
    assert m.covariates_at(2.0) == {"temp": 4.0, "rain": 3.0}


def test_linear_interpolation_lies_between_knots():
    value = _model().covariates_at(0.25)["temp"]
    assert 2.0 < value < 6.0


def test_constant_interpolation_takes_left_value():
    m = _model("constant")
    assert m.covariates_at(1.7) == {"temp": 6.0, "rain": 1.0}
    assert m.covariates_at(0.5)["temp"] == 2.0


def test_extrapolation_warns_and_uses_end_value():
    m = _model()
    with pytest.warns(RuntimeWarning, match="extrapolating"):
        assert m.covariates_at(5.0)["temp"] == 4.0


def test_no_covariates_gives_empty_mapping():
    assert Model().covariates_at(3.0) == {}


def test_covariate_length_mismatch_rejected():
    with pytest.raises(ValueError, match="covariate 'a'"):
        Model(covar={"a": [1.0, 2.0]}, covar_times=[0.0, 1.0, 2.0])


def test_bad_interpolation_order_rejected():
    with pytest.raises(ValueError):
        Model(covar_order="cubic")


def test_decreasing_covariate_times_rejected():
    with pytest.raises(ValueError):
        Model(covar={"a": [1.0, 2.0]}, covar_times=[1.0, 0.0])


def test_userdata_mapping_is_wrapped():
    m = Model(userdata={"n": 3})
    assert isinstance(m.userdata, UserData)
    assert m.userdata.get("n") == 3


def test_gillespie_process_is_typed_and_checked():
    proc = GillespieProcess(lambda **kw: 1.0, [[1.0, -1.0]])
    assert proc.kind is ProcessType.GILLESPIE
    assert proc.v.values.shape == (1, 2)
    with pytest.raises(ValueError):
        GillespieProcess(lambda **kw: 1.0, [[1.0]], hmax=0.0)