"""可变单元 (Variable) 实现模块。

Variable 独占持有一个值 (通常是 Matrix), 是计算图观察的变更点:
SourceNode 只引用 Variable 而不拥有它, 每次求值都会重新读取当前值。

Python 引用本身会延长 Variable 的生命周期, 因此被 SourceNode 引用的
Variable 不会在求值前失效。
"""

import copy
import logging
from typing import Any, Generic, TypeVar

import numpy as np

from ..config import get_config
from ..errors import ShapeMismatchError, TypeNotConvertibleError
from ..utils.dtypes import cast_scalar, is_scalar, require_convertible
from .matrix import Matrix
from .output_types import MatrixType, OpaqueType, OutputType, ScalarType, type_of

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Variable(Generic[T]):
    """持有单个值的可变单元。

    构造时复制初始值; 此后值的类型 (矩阵则包括形状) 保持不变。

    Attributes:
        output_type: 构造时确定的值类型描述

    Example:
        >>> v = Variable(Matrix.identity(2))
        >>> v.value[0, 1] = 5.0     # 通过引用原地修改
        >>> v.value = Matrix.ones(2, 2)  # 整体写入, 形状必须一致
        >>> v.view[0, 0] = 3.0      # 只读视图, 抛出 ValueError
    """

    def __init__(self, value: T) -> None:
        """初始化可变单元。

        Args:
            value: 初始值, 会被深拷贝
        """
        self._value: T = copy.deepcopy(value)
        self.output_type: OutputType = type_of(self._value)
        logger.debug(f"创建变量: {self.output_type}")

    @property
    def value(self) -> T:
        """可读写访问: 返回持有对象本身。"""
        return self._value

    @value.setter
    def value(self, new_value: T) -> None:
        self._write(new_value)

    @property
    def view(self) -> T:
        """只读访问: 矩阵返回共享缓冲区的只读视图, 其他值原样返回。

        视图不复制数据, 之后通过 ``value`` 的修改在视图中可见。
        """
        if isinstance(self._value, Matrix):
            return self._value.readonly_view()  # type: ignore[return-value]
        return self._value

    def _write(self, new_value: Any) -> None:
        expected = self.output_type
        casting = get_config().scalar_casting

        if isinstance(expected, MatrixType):
            if not isinstance(new_value, Matrix):
                raise TypeNotConvertibleError(
                    f"Variable holds {expected}, cannot assign {type(new_value).__name__}"
                )
            if new_value.shape != expected.shape:
                raise ShapeMismatchError(
                    f"Variable holds {expected}, cannot assign a "
                    f"{new_value.rows}x{new_value.cols} matrix"
                )
            # 原地写入, 已取出的引用仍然有效
            self._value.assign(new_value)  # type: ignore[attr-defined]

        elif isinstance(expected, ScalarType):
            if not is_scalar(new_value):
                raise TypeNotConvertibleError(
                    f"Variable holds {expected}, cannot assign {type(new_value).__name__}"
                )
            if expected.kind in _PYTHON_KIND_ORDER:
                if not _python_scalar_convertible(new_value, expected.kind, casting):
                    raise TypeNotConvertibleError(
                        f"Cannot convert {type(new_value).__name__} to {expected} "
                        f"under '{casting}' casting"
                    )
                self._value = expected.kind(new_value)
            else:
                require_convertible(new_value, np.dtype(expected.kind), casting)
                self._value = cast_scalar(new_value, np.dtype(expected.kind))

        else:
            assert isinstance(expected, OpaqueType)
            if not isinstance(new_value, expected.kind):
                raise TypeNotConvertibleError(
                    f"Variable holds {expected}, cannot assign {type(new_value).__name__}"
                )
            self._value = copy.deepcopy(new_value)

    def get(self) -> T:
        """返回当前值的副本。"""
        return copy.deepcopy(self._value)

    def __str__(self) -> str:
        return str(self._value)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._value!r})"


class Constant(Variable[T]):
    """只读的可变单元。

    重新赋值会抛出 TypeError; 矩阵值以只读视图形式返回。
    """

    @property
    def value(self) -> T:
        return self.view

    @value.setter
    def value(self, new_value: T) -> None:
        raise TypeError("Constant cannot be reassigned")


def create_variable(value: T) -> Variable[T]:
    """创建 Variable 的便捷函数。"""
    return Variable(value)


_PYTHON_KIND_ORDER = (bool, int, float, complex)


def _python_scalar_convertible(value: Any, kind: type, casting: str) -> bool:
    if casting == "unsafe":
        return True
    # numpy 标量按其 Python 对应类型比较
    source = value.item() if hasattr(value, "item") else value
    rank = next(i for i, t in enumerate(_PYTHON_KIND_ORDER) if isinstance(source, t))
    return rank <= _PYTHON_KIND_ORDER.index(kind)
