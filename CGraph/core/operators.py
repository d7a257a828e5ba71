"""图构建器: 节点之间的二元运算。

``left + right`` 等运算构建一个新的 OperationNode, 其函数为对应的二元组合子,
子节点为两个操作数的副本。输出类型由两个操作数的输出类型静态推导:
两个矩阵节点相乘得到矩阵乘积形状的矩阵节点, 两个标量节点相乘得到标量节点。
同一个运算符因此会根据操作数最终产出的类型表示不同的底层运算。

不提供一元取负与比较运算。
"""

import logging
from typing import Any, Callable, Dict

from .computation_graph import Node, OperationNode
from .output_types import infer_binary

logger = logging.getLogger(__name__)


def add(lhs: Any, rhs: Any) -> Any:
    return lhs + rhs


def subtract(lhs: Any, rhs: Any) -> Any:
    return lhs - rhs


def multiply(lhs: Any, rhs: Any) -> Any:
    return lhs * rhs


def divide(lhs: Any, rhs: Any) -> Any:
    return lhs / rhs


BINARY_OPERATIONS: Dict[str, Callable[[Any, Any], Any]] = {
    "add": add,
    "subtract": subtract,
    "multiply": multiply,
    "divide": divide,
}


def build_binary(name: str, left: Node, right: Any) -> OperationNode:
    """构建二元运算节点。

    Args:
        name: 运算名称 (add/subtract/multiply/divide)
        left: 左操作数节点
        right: 右操作数, 必须是节点

    Returns:
        OperationNode: 新节点; right 不是节点时返回 NotImplemented

    Raises:
        ShapeMismatchError: 两个矩阵节点的形状不兼容
        TypeError: 运算在两种输出类型之间未定义
    """
    if not isinstance(right, Node):
        return NotImplemented
    output_type = infer_binary(name, left.output_type, right.output_type)
    logger.debug(f"{name}: {left.output_type} , {right.output_type} -> {output_type}")
    return OperationNode(
        BINARY_OPERATIONS[name],
        (left, right),
        name=name,
        output_type=output_type,
    )


__all__ = ["add", "subtract", "multiply", "divide", "BINARY_OPERATIONS", "build_binary"]
