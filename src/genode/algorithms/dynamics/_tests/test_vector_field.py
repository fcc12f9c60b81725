import numpy as np
import pytest

from genode.algorithms.dynamics.base import VectorFieldProtocol
from genode.algorithms.dynamics.rhs import (RHSVectorField, as_vector_field,
                                            create_vector_field)
from genode.algorithms.utils.exceptions import DimensionMismatch


def _decay(t, y):
    return [-y[0], -2 * y[1]]


def test_create_vector_field():
    field = create_vector_field(_decay, 2, name="decay")
    assert isinstance(field, RHSVectorField)
    assert isinstance(field, VectorFieldProtocol)
    assert field.dim == 2
    assert field.name == "decay"
    assert field.supports_dual
    assert field(0.0, np.array([1.0, 1.0])) == [-1.0, -2.0]
    assert repr(field) == "RHSVectorField(name='decay', dim=2)"


def test_invalid_dimension_and_callable():
    with pytest.raises(ValueError):
        create_vector_field(_decay, 0)
    with pytest.raises(TypeError):
        create_vector_field("not callable", 2)


def test_validate_state():
    field = create_vector_field(_decay, 2)
    field.validate_state(np.zeros(2))
    with pytest.raises(DimensionMismatch):
        field.validate_state(np.zeros(3))
    with pytest.raises(DimensionMismatch):
        field.validate_state(np.zeros((2, 2)))
    # DimensionMismatch is also a ValueError
    with pytest.raises(ValueError):
        field.validate_state(np.zeros(1))


def test_validate_derivative():
    field = create_vector_field(_decay, 2)
    field.validate_derivative([1.0, 2.0])
    with pytest.raises(DimensionMismatch):
        field.validate_derivative([1.0, 2.0, 3.0])
    with pytest.raises(DimensionMismatch):
        field.validate_derivative(1.0)


def test_as_vector_field_wraps_protocol_objects():
    class Rotation:
        dim = 2
        name = "rotation"

        @property
        def rhs(self):
            return lambda t, y: [-y[1], y[0]]

    wrapped = as_vector_field(Rotation())
    assert isinstance(wrapped, RHSVectorField)
    assert wrapped.dim == 2
    assert wrapped.name == "rotation"

    field = create_vector_field(_decay, 2)
    assert as_vector_field(field) is field

    with pytest.raises(TypeError):
        as_vector_field(_decay)
