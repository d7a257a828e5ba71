"""计算图实现模块。

本模块提供惰性计算图的核心数据结构，支持：
- 节点类型：SourceNode（引用可变单元的叶子）、OperationNode（函数与子节点）
- 输出类型：每个节点声明输出类型，构建阶段即可发现形状错误
- 按值构建：组合节点持有子节点的独立副本，源节点副本仍引用同一个 Variable

计算图不缓存任何结果。每次调用 compute() 都从调用点自顶向下完整重算，
因此 Variable 的修改会在下一次求值时体现，而不会影响已经得到的结果。
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from .output_types import OpaqueType, OutputType
from .variable import Constant, Variable

logger = logging.getLogger(__name__)


class Node(ABC):
    """计算图节点抽象基类。

    节点种类是封闭的: 只有 SourceNode 与 OperationNode 两种。
    两个节点之间的 ``+ - * /`` 会构建新的 OperationNode (见 operators 模块)。

    Attributes:
        name: 节点名称，用于调试和日志
        inputs: 子节点元组
    """

    def __init__(self, name: str) -> None:
        """初始化节点。

        Args:
            name: 节点名称
        """
        self.name = name
        self.inputs: Tuple["Node", ...] = ()

    @property
    @abstractmethod
    def output_type(self) -> OutputType:
        """节点输出类型。"""

    @abstractmethod
    def compute(self) -> Any:
        """执行节点计算。

        Returns:
            Any: 计算结果
        """

    @abstractmethod
    def clone(self) -> "Node":
        """返回节点的结构副本。"""

    def __call__(self) -> Any:
        return self.compute()

    def __copy__(self) -> "Node":
        return self.clone()

    def __deepcopy__(self, memo: Dict[int, Any]) -> "Node":
        # 深拷贝同样只复制结构, 不复制被引用的 Variable
        return self.clone()

    def __add__(self, other: Any) -> "OperationNode":
        from .operators import build_binary

        return build_binary("add", self, other)

    def __sub__(self, other: Any) -> "OperationNode":
        from .operators import build_binary

        return build_binary("subtract", self, other)

    def __mul__(self, other: Any) -> "OperationNode":
        from .operators import build_binary

        return build_binary("multiply", self, other)

    def __truediv__(self, other: Any) -> "OperationNode":
        from .operators import build_binary

        return build_binary("divide", self, other)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, output_type={self.output_type})"


class SourceNode(Node):
    """数据源节点，代表计算图的输入。

    SourceNode 是计算图的叶子节点，只引用 Variable 而不拥有它。
    每次 compute() 都返回 Variable 当前持有的对象本身，不做任何计算。

    Attributes:
        variable: 被引用的可变单元
    """

    def __init__(self, variable: Variable, name: str = "source") -> None:
        """初始化数据源节点。

        Args:
            variable: 被引用的 Variable
            name: 节点名称，默认为 "source"

        Raises:
            TypeError: variable 不是 Variable
        """
        if not isinstance(variable, Variable):
            raise TypeError(
                f"SourceNode needs a Variable, got {type(variable).__name__}"
            )
        super().__init__(name)
        self.variable = variable

    @property
    def output_type(self) -> OutputType:
        return self.variable.output_type

    def compute(self) -> Any:
        """返回 Variable 的当前值。

        Returns:
            Any: Variable 持有的对象 (可读写引用)
        """
        return self.variable.value

    def view(self) -> Any:
        """返回 Variable 当前值的只读视图, 供只读观察者使用。"""
        return self.variable.view

    def clone(self) -> "SourceNode":
        """复制引用, 不复制 Variable。"""
        return SourceNode(self.variable, name=self.name)


class OperationNode(Node):
    """操作节点，持有一个 n 元函数与其子节点的副本。

    求值时依次 (从左到右) 重新计算每个子节点，再以子节点结果、
    ``args`` 与 ``kwargs`` 调用函数。函数抛出的异常原样向上传播。
    构建节点时不会调用函数。

    Attributes:
        operation: n 元函数
        args: 追加在子节点结果之后的位置参数
        kwargs: 关键字参数字典
    """

    def __init__(
        self,
        operation: Callable[..., Any],
        inputs: Sequence[Node] = (),
        args: Tuple[Any, ...] = (),
        kwargs: Optional[Dict[str, Any]] = None,
        name: Optional[str] = None,
        output_type: Optional[OutputType] = None,
    ) -> None:
        """初始化操作节点。

        Args:
            operation: 函数，参数个数等于子节点数 (加上 args)
            inputs: 子节点，逐个复制后持有
            args: 位置参数
            kwargs: 关键字参数
            name: 节点名称，默认为函数名
            output_type: 输出类型，默认为 OpaqueType

        Raises:
            TypeError: operation 不可调用或 inputs 中含有非节点对象
        """
        if not callable(operation):
            raise TypeError(f"operation must be callable, got {type(operation).__name__}")
        for node in inputs:
            if not isinstance(node, Node):
                raise TypeError(
                    f"OperationNode inputs must be nodes, got {type(node).__name__}"
                )
        super().__init__(name or getattr(operation, "__name__", "operation"))
        self.operation = operation
        self.inputs = tuple(_clone_tree(node) for node in inputs)
        self.args = tuple(args)
        self.kwargs = dict(kwargs or {})
        self._output_type = output_type if output_type is not None else OpaqueType()
        logger.debug(f"构建操作节点: {self.name} ({len(self.inputs)} 个输入)")

    @property
    def output_type(self) -> OutputType:
        return self._output_type

    def compute(self) -> Any:
        """重新计算整个子树。

        Returns:
            Any: 函数的返回值
        """
        logger.debug(f"计算节点: {self.name}")
        return _evaluate(self)

    def apply(self, *values: Any) -> Any:
        """以给定的子节点结果调用函数。"""
        return self.operation(*values, *self.args, **self.kwargs)

    def clone(self) -> "OperationNode":
        """深度复制结构: 函数共享, 子节点逐层复制。"""
        return _clone_tree(self)

    def _with_inputs(self, inputs: Tuple[Node, ...]) -> "OperationNode":
        node = OperationNode.__new__(OperationNode)
        Node.__init__(node, self.name)
        node.operation = self.operation
        node.inputs = inputs
        node.args = self.args
        node.kwargs = dict(self.kwargs)
        node._output_type = self._output_type
        return node


def _fold(
    root: Node,
    on_source: Callable[[SourceNode], Any],
    on_operation: Callable[[OperationNode, List[Any]], Any],
) -> Any:
    """以显式栈做后序遍历, 深链不受递归深度限制。

    子节点按从左到右的顺序处理, 每个操作节点收到其子节点的结果列表。
    """
    stack: List[Tuple[Node, bool]] = [(root, False)]
    results: List[Any] = []
    while stack:
        node, expanded = stack.pop()
        if isinstance(node, SourceNode):
            results.append(on_source(node))
        elif not expanded:
            stack.append((node, True))
            stack.extend((child, False) for child in reversed(node.inputs))
        else:
            assert isinstance(node, OperationNode)
            split = len(results) - len(node.inputs)
            children = results[split:]
            del results[split:]
            results.append(on_operation(node, children))
    return results[0]


def _evaluate(root: Node) -> Any:
    return _fold(root, lambda node: node.compute(), lambda node, values: node.apply(*values))


def _clone_tree(root: Node) -> Node:
    return _fold(
        root,
        lambda node: node.clone(),
        lambda node, children: node._with_inputs(tuple(children)),
    )


def source(variable: Variable, name: str = "source") -> SourceNode:
    """为 Variable 创建数据源节点。"""
    return SourceNode(variable, name=name)


def constant(value: Any, name: str = "constant") -> SourceNode:
    """为常量值创建数据源节点 (值被复制进一个 Constant)。"""
    return SourceNode(Constant(value), name=name)


class ComputationGraph:
    """计算图容器，以根节点代表整棵表达式树。

    Attributes:
        root: 计算图的根节点（输出节点）
    """

    def __init__(self, root: Optional[Node] = None) -> None:
        """初始化计算图。

        Args:
            root: 根节点，默认为 None 表示空图
        """
        self.root = root

    @classmethod
    def leaf(cls, variable: Variable) -> "ComputationGraph":
        """创建只包含一个数据源节点的计算图。

        Args:
            variable: 被引用的 Variable

        Returns:
            ComputationGraph: 新的计算图实例
        """
        return cls(SourceNode(variable))

    @property
    def nodes(self) -> List[Node]:
        """获取计算图中的所有节点（拓扑序，叶子在前）。

        Returns:
            List[Node]: 按拓扑顺序排列的节点列表
        """
        if not self.root:
            return []

        visited: set[int] = set()
        stack = [self.root]
        result: List[Node] = []
        while stack:
            node = stack.pop()
            if id(node) not in visited:
                visited.add(id(node))
                result.append(node)
                stack.extend(node.inputs)
        return list(reversed(result))

    @property
    def sources(self) -> List[SourceNode]:
        """所有数据源节点。"""
        return [node for node in self.nodes if isinstance(node, SourceNode)]

    @property
    def variables(self) -> List[Variable]:
        """被引用的不同 Variable，按首次出现顺序。"""
        seen: Dict[int, Variable] = {}
        for node in self.sources:
            seen.setdefault(id(node.variable), node.variable)
        return list(seen.values())

    @property
    def output_type(self) -> OutputType:
        if not self.root:
            raise ValueError("计算图没有根节点")
        return self.root.output_type

    def compute(self) -> Any:
        """从根节点求值。

        Raises:
            ValueError: 空图
        """
        if not self.root:
            raise ValueError("计算图没有根节点")
        return self.root.compute()

    def __len__(self) -> int:
        return len(self.nodes)
