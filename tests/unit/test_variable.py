"""Variable 单元测试"""

import numpy as np
import pytest

from CGraph.config import config_context
from CGraph.core.matrix import Matrix
from CGraph.core.output_types import MatrixType, OpaqueType, ScalarType
from CGraph.core.variable import Constant, Variable, create_variable
from CGraph.errors import ShapeMismatchError, TypeNotConvertibleError


class TestMatrixVariable:
    """测试持有矩阵的 Variable"""

    def test_copies_initial_value(self):
        m = Matrix.identity(2)
        v = Variable(m)
        m[0, 0] = 9.0

        assert v.value[0, 0] == 1.0

    def test_value_is_live_reference(self):
        v = Variable(Matrix.identity(2))

        assert v.value is v.value
        v.value[0, 1] = 3.0
        assert v.value[0, 1] == 3.0

    def test_assign_writes_in_place(self):
        v = Variable(Matrix.identity(2))
        ref = v.value
        v.value = Matrix.ones(2, 2)

        assert ref == Matrix.ones(2, 2)
        assert v.value is ref

    def test_assign_shape_mismatch(self):
        v = Variable(Matrix.identity(2))

        with pytest.raises(ShapeMismatchError):
            v.value = Matrix.ones(3, 3)

    def test_assign_wrong_type(self):
        v = Variable(Matrix.identity(2))

        with pytest.raises(TypeNotConvertibleError):
            v.value = 1.0

    def test_assign_lossy_element_type(self):
        v = Variable(Matrix.identity(2, dtype="int32"))

        with pytest.raises(TypeNotConvertibleError):
            v.value = Matrix.ones(2, 2)

    def test_view_is_read_only(self):
        v = Variable(Matrix.identity(2))

        with pytest.raises(ValueError):
            v.view[0, 0] = 5.0
        assert v.value[0, 0] == 1.0

    def test_view_reflects_later_writes(self):
        v = Variable(Matrix.identity(2))
        view = v.view

        v.value[0, 1] = 3.0
        v.value = Matrix.ones(2, 2) * 2
        assert view == Matrix.constant(2, 2, 2.0)

    def test_get_returns_copy(self):
        v = Variable(Matrix.identity(2))
        snapshot = v.get()
        snapshot[0, 0] = 5.0

        assert v.value[0, 0] == 1.0

    def test_output_type(self):
        v = Variable(Matrix(2, 3, dtype="float32"))
        assert v.output_type == MatrixType(2, 3, np.dtype("float32"))

    def test_str(self):
        m = Matrix(2, 2, 1, 2, 3, 4)
        assert str(Variable(m)) == str(m)


class TestScalarVariable:
    """测试持有标量的 Variable"""

    def test_int_into_float(self):
        v = Variable(2.0)
        v.value = 3

        assert v.value == 3.0
        assert isinstance(v.value, float)
        assert v.output_type == ScalarType(float)

    def test_float_into_int_rejected(self):
        v = Variable(2)

        with pytest.raises(TypeNotConvertibleError):
            v.value = 2.5

    def test_float_into_int_unsafe(self):
        v = Variable(2)
        with config_context(scalar_casting="unsafe"):
            v.value = 2.5

        assert v.value == 2

    def test_numpy_scalar(self):
        v = Variable(np.float32(1.0))
        v.value = 4

        assert v.value == np.float32(4.0)
        assert isinstance(v.value, np.float32)
        with pytest.raises(TypeNotConvertibleError):
            v.value = np.complex128(1j)

    def test_numpy_scalar_out_of_range(self):
        v = Variable(np.int8(1))

        with pytest.raises(TypeNotConvertibleError):
            v.value = 300
        assert v.value == np.int8(1)

        with config_context(scalar_casting="unsafe"):
            v.value = 300
        assert v.value == np.int8(44)
        assert isinstance(v.value, np.int8)

    def test_scalar_view(self):
        v = Variable(2.5)
        assert v.view == 2.5

    def test_non_scalar_rejected(self):
        v = Variable(1.0)

        with pytest.raises(TypeNotConvertibleError):
            v.value = "1.0"


class TestOpaqueVariable:
    """测试持有其他对象的 Variable"""

    def test_list_value(self):
        data = [1, 2]
        v = Variable(data)
        data.append(3)

        assert v.value == [1, 2]
        assert v.output_type == OpaqueType(list)

    def test_type_checked(self):
        v = Variable([1, 2])
        v.value = [4]
        assert v.value == [4]

        with pytest.raises(TypeNotConvertibleError):
            v.value = (4,)


class TestConstant:
    """测试只读 Variable"""

    def test_reassign_rejected(self):
        c = Constant(Matrix.identity(2))

        with pytest.raises(TypeError, match="Constant"):
            c.value = Matrix.ones(2, 2)

    def test_matrix_is_read_only(self):
        c = Constant(Matrix.identity(2))

        with pytest.raises(ValueError):
            c.value[0, 0] = 2.0
        assert c.value == Matrix.identity(2)

    def test_scalar(self):
        c = Constant(3)
        assert c.value == 3


def test_create_variable():
    v = create_variable(Matrix.identity(2))
    assert isinstance(v, Variable)
    assert v.value == Matrix.identity(2)
