"""元素类型工具。

集中定义矩阵支持的算术元素类型、标量判定以及标量到元素类型的转换规则。

转换策略:
    - "same_kind": Python bool/int 可写入任意元素类型, float 只能写入浮点或复数,
      complex 只能写入复数; Python int 还必须落在整数元素类型的取值范围内。
      NumPy 标量与数组遵循 ``numpy.can_cast(..., "same_kind")``。
    - "unsafe": 任意数值都被接受, 按 C 风格强制转换截断, 超出范围的整数按模回绕。

Example:
    >>> can_convert(1.5, "int32", "same_kind")
    False
    >>> can_convert(1.5, "int32", "unsafe")
    True
"""

from typing import Any, Literal, Tuple, Union

import numpy as np

from ..errors import TypeNotConvertibleError

CastingPolicy = Literal["same_kind", "unsafe"]
DTypeLike = Union[str, type, np.dtype]

# 支持的算术元素类型 (numba 内核可以编译的全部类型)
SUPPORTED_DTYPES: Tuple[np.dtype, ...] = tuple(
    np.dtype(name)
    for name in (
        "int8",
        "int16",
        "int32",
        "int64",
        "uint8",
        "uint16",
        "uint32",
        "uint64",
        "float32",
        "float64",
        "complex64",
        "complex128",
    )
)

# Python 内置标量可写入的 dtype.kind
_PYTHON_SCALAR_KINDS = (
    (bool, "biufc"),
    (int, "iufc"),
    (float, "fc"),
    (complex, "c"),
)


def element_dtype(dtype: DTypeLike) -> np.dtype:
    """解析并校验矩阵元素类型。

    Args:
        dtype: 类型名称、Python 类型或 numpy dtype

    Returns:
        np.dtype: 规范化后的元素类型

    Raises:
        TypeNotConvertibleError: 不是受支持的算术类型
    """
    try:
        resolved = np.dtype(dtype)
    except TypeError as e:
        raise TypeNotConvertibleError(f"Unknown element type: {dtype!r}") from e
    if resolved not in SUPPORTED_DTYPES:
        raise TypeNotConvertibleError(
            f"Element type {resolved} is not an arithmetic type supported by Matrix"
        )
    return resolved


def is_scalar(value: Any) -> bool:
    """判断值是否为可参与矩阵运算的数值标量。"""
    if isinstance(value, (bool, int, float, complex, np.bool_)):
        return True
    if isinstance(value, np.number):
        return value.dtype in SUPPORTED_DTYPES
    return False


def check_scalar(value: Any) -> Any:
    """确认值是数值标量, 否则抛出 TypeNotConvertibleError。"""
    if not is_scalar(value):
        raise TypeNotConvertibleError(
            f"Operand of type {type(value).__name__} is not a numeric scalar"
        )
    return value


def can_convert(value: Any, target: DTypeLike, casting: CastingPolicy) -> bool:
    """判断标量值或 dtype 能否按转换策略写入目标元素类型。

    Args:
        value: Python/NumPy 数值标量, 或一个 numpy dtype
        target: 目标元素类型
        casting: 转换策略

    Returns:
        bool: 是否允许转换
    """
    target = np.dtype(target)
    if isinstance(value, np.dtype):
        return casting == "unsafe" or bool(np.can_cast(value, target, casting))
    if not is_scalar(value):
        return False
    if casting == "unsafe":
        return True
    if isinstance(value, np.generic):
        return bool(np.can_cast(value.dtype, target, casting))
    for py_type, kinds in _PYTHON_SCALAR_KINDS:
        if isinstance(value, py_type):
            return target.kind in kinds and in_range(value, target)
    return False


def _is_python_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def in_range(value: Any, target: DTypeLike) -> bool:
    """判断 Python int 是否落在目标元素类型的取值范围内。

    其他标量总是返回 True: NumPy 标量按 dtype 规则处理, 不看具体取值。
    """
    if not _is_python_int(value):
        return True
    target = np.dtype(target)
    if target.kind in "iu":
        info = np.iinfo(target)
        return bool(info.min <= value <= info.max)
    try:
        float(value)
    except OverflowError:
        return False
    return True


def cast_scalar(value: Any, target: DTypeLike) -> np.generic:
    """按 C 风格强制转换把标量转为目标元素类型。

    超出范围的 Python int 对整数类型按模回绕, 对浮点类型饱和为 ±inf。

    Example:
        >>> cast_scalar(300, "int8")
        np.int8(44)
    """
    target = np.dtype(target)
    if not in_range(value, target):
        if target.kind in "iu":
            info = np.iinfo(target)
            span = int(info.max) - int(info.min) + 1
            value = (value - int(info.min)) % span + int(info.min)
        else:
            value = float("inf") if value > 0 else float("-inf")
    return np.asarray(value).astype(target)[()]


def fit_scalar(value: Any, target: DTypeLike, casting: CastingPolicy) -> Any:
    """准备与目标元素类型的数组运算的标量。

    范围内的值原样返回, 由 NumPy 按弱类型规则提升; 超出范围的 Python int
    在 "same_kind" 下被拒绝, 在 "unsafe" 下先转换为目标类型。

    Raises:
        TypeNotConvertibleError: "same_kind" 策略下 Python int 超出范围
    """
    if in_range(value, target):
        return value
    if casting == "unsafe":
        return cast_scalar(value, target)
    raise TypeNotConvertibleError(
        f"Python integer {value} is out of range for element type {np.dtype(target)}"
    )


def require_convertible(
    value: Any, target: DTypeLike, casting: CastingPolicy, what: str = "value"
) -> None:
    """按转换策略校验, 不允许时抛出 TypeNotConvertibleError。"""
    if not can_convert(value, target, casting):
        source = value if isinstance(value, np.dtype) else type(value).__name__
        raise TypeNotConvertibleError(
            f"Cannot convert {what} of type {source} to element type "
            f"{np.dtype(target)} under '{casting}' casting"
        )


__all__ = [
    "CastingPolicy",
    "DTypeLike",
    "SUPPORTED_DTYPES",
    "element_dtype",
    "is_scalar",
    "check_scalar",
    "can_convert",
    "require_convertible",
    "in_range",
    "cast_scalar",
    "fit_scalar",
]
