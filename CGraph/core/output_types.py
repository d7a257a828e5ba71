"""节点输出类型描述与静态推导。

每个计算图节点都声明其输出类型, 图构建器在创建新节点时据此推导结果类型,
并在构建阶段 (而非求值阶段) 暴露形状不匹配等错误。推导过程不会求值任何节点。

输出类型分为三类:
    - MatrixType: 固定形状与元素类型的矩阵
    - ScalarType: Python 或 NumPy 数值标量
    - OpaqueType: 其他任意类型, 不参与推导
"""

import operator
from dataclasses import dataclass
from typing import Any, Callable, Dict, Tuple, Union

import numpy as np

from ..errors import ShapeMismatchError
from ..utils.dtypes import is_scalar
from .matrix import Matrix


@dataclass(frozen=True)
class MatrixType:
    """矩阵输出类型。"""

    rows: int
    cols: int
    dtype: np.dtype

    @property
    def shape(self) -> Tuple[int, int]:
        return (self.rows, self.cols)

    def __str__(self) -> str:
        return f"Matrix[{self.dtype}, {self.rows}x{self.cols}]"


@dataclass(frozen=True)
class ScalarType:
    """标量输出类型, kind 为 Python 内置数值类型或 NumPy 标量类型。"""

    kind: type

    def prototype(self) -> Any:
        """返回该类型的代表值, 仅用于类型推导。"""
        return self.kind(1)

    def __str__(self) -> str:
        return self.kind.__name__


@dataclass(frozen=True)
class OpaqueType:
    """无法静态推导的输出类型。"""

    kind: type = object

    def __str__(self) -> str:
        return f"Opaque[{self.kind.__name__}]"


OutputType = Union[MatrixType, ScalarType, OpaqueType]

# 二元组合子名称 -> (Python 运算符, NumPy ufunc, 符号)
_BINARY_RULES: Dict[str, Tuple[Callable[[Any, Any], Any], np.ufunc, str]] = {
    "add": (operator.add, np.add, "+"),
    "subtract": (operator.sub, np.subtract, "-"),
    "multiply": (operator.mul, np.multiply, "*"),
    "divide": (operator.truediv, np.true_divide, "/"),
}


def type_of(value: Any) -> OutputType:
    """描述一个具体值的输出类型。"""
    if isinstance(value, Matrix):
        return MatrixType(value.rows, value.cols, value.dtype)
    if is_scalar(value):
        return ScalarType(type(value))
    return OpaqueType(type(value))


def _dtype_operand(output_type: OutputType) -> Any:
    # 矩阵用单元素数组代表, 标量保留 Python 弱类型语义
    if isinstance(output_type, MatrixType):
        return np.ones(1, dtype=output_type.dtype)
    return output_type.prototype()


def infer_binary(name: str, left: OutputType, right: OutputType) -> OutputType:
    """推导二元组合子的输出类型。

    Args:
        name: 组合子名称, 取值 add/subtract/multiply/divide
        left: 左操作数输出类型
        right: 右操作数输出类型

    Returns:
        OutputType: 组合子作用于两类操作数时的结果类型

    Raises:
        ShapeMismatchError: 矩阵形状不满足运算要求
        TypeError: 运算未定义, 例如矩阵除以矩阵
    """
    py_op, ufunc, symbol = _BINARY_RULES[name]

    if isinstance(left, OpaqueType) or isinstance(right, OpaqueType):
        return OpaqueType()

    if isinstance(left, ScalarType) and isinstance(right, ScalarType):
        return ScalarType(type(py_op(left.prototype(), right.prototype())))

    if isinstance(left, MatrixType) and isinstance(right, MatrixType):
        if name == "multiply":
            if left.cols != right.rows:
                raise ShapeMismatchError(
                    f"Matrix product needs inner dimensions to agree, got {left} and {right}"
                )
            return MatrixType(left.rows, right.cols, np.result_type(left.dtype, right.dtype))
        if name == "divide":
            raise TypeError(f"Operator '/' is not defined between {left} and {right}")
        if left.shape != right.shape:
            raise ShapeMismatchError(
                f"Operator '{symbol}' needs equal shapes, got {left} and {right}"
            )

    matrix = left if isinstance(left, MatrixType) else right
    dtype = ufunc(_dtype_operand(left), _dtype_operand(right)).dtype
    return MatrixType(matrix.rows, matrix.cols, dtype)


__all__ = [
    "MatrixType",
    "ScalarType",
    "OpaqueType",
    "OutputType",
    "type_of",
    "infer_binary",
]
