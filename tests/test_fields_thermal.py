import numpy as np
import pytest

from domain_integral.errors import ConfigurationError
from domain_integral.fields import QuadratureFields, ThermalFields


def _arrays(ne=2, nqp=3, dim=2):
    return dict(
        stress=np.zeros((ne, nqp, 6)),
        strain=np.zeros((ne, nqp, 6)),
        grad_disp_x=np.zeros((ne, nqp, dim)),
        grad_disp_y=np.zeros((ne, nqp, dim)),
        aux_stress=np.zeros((ne, nqp, 3, 3)),
        aux_grad_disp=np.zeros((ne, nqp, 3, 3)),
    )


def test_temperature_without_expansion_is_a_configuration_error():
    with pytest.raises(ConfigurationError, match="thermal expansion"):
        QuadratureFields.from_arrays(**_arrays(), grad_temp=np.zeros((2, 3, 2)))


def test_expansion_without_temperature_is_ignored():
    f = QuadratureFields.from_arrays(**_arrays(), thermal_expansion=1e-5)
    assert not f.has_temperature
    assert f.thermal_at(0, 0) is None


def test_scalar_expansion_is_broadcast_per_point():
    f = QuadratureFields.from_arrays(**_arrays(), grad_temp=np.ones((2, 3, 2)), thermal_expansion=2.0)
    assert isinstance(f.thermal, ThermalFields)
    grad_temp, alpha = f.thermal_at(1, 2)
    assert alpha == 2.0
    assert np.array_equal(grad_temp, [1.0, 1.0, 0.0])


def test_2d_gradients_are_padded():
    f = QuadratureFields.from_arrays(**_arrays())
    assert f.grad_disp_x.shape == (2, 3, 3)
    gx, gy, gz = f.displacement_gradients(0, 0)
    assert gz is None
    assert f.grad_disp_tensor().shape == (2, 3, 3, 3)


def test_shape_mismatch_is_reported():
    arrays = _arrays()
    arrays["aux_stress"] = np.zeros((2, 4, 3, 3))
    with pytest.raises(ConfigurationError, match="aux_stress"):
        QuadratureFields.from_arrays(**arrays)
