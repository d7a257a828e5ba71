"""CGraph 错误类型。

所有错误都是调用方可检测的前置条件违规，在修改任何状态之前抛出。
每个错误同时继承对应的内置异常，便于按 Python 习惯捕获。
"""


class CGraphError(Exception):
    """CGraph 所有错误的基类。"""


class ShapeMismatchError(CGraphError, ValueError):
    """两个矩阵的形状不满足运算要求。"""


class TypeNotConvertibleError(CGraphError, TypeError):
    """标量或元素类型无法按当前转换策略表示为目标元素类型。"""


class IndexOutOfRangeError(CGraphError, IndexError):
    """元素访问越界。"""


class InvalidShapeOperationError(CGraphError, ValueError):
    """当前形状不支持该操作，例如非方阵求单位阵。"""


__all__ = [
    "CGraphError",
    "ShapeMismatchError",
    "TypeNotConvertibleError",
    "IndexOutOfRangeError",
    "InvalidShapeOperationError",
]
