"""ComputationGraph 单元测试"""

import copy

import numpy as np
import pytest

from CGraph.core.computation_graph import (
    ComputationGraph,
    Node,
    OperationNode,
    SourceNode,
    constant,
    source,
)
from CGraph.core.matrix import Matrix
from CGraph.core.output_types import MatrixType, OpaqueType
from CGraph.core.variable import Variable


class TestSourceNode:
    """测试 SourceNode"""

    def test_create_source_node(self):
        """测试创建源节点"""
        v = Variable(Matrix.identity(2))
        node = SourceNode(v, name="test_source")

        assert node.name == "test_source"
        assert node.variable is v
        assert node.output_type == MatrixType(2, 2, np.dtype("float64"))

    def test_compute_returns_live_value(self):
        """测试源节点返回 Variable 持有的对象本身"""
        v = Variable(Matrix.identity(2))
        node = SourceNode(v)

        assert node.compute() is v.value
        assert node() is v.value

    def test_sees_mutation(self):
        """测试 Variable 修改在下一次求值时可见"""
        v = Variable(Matrix.identity(2))
        node = source(v)
        v.value[0, 1] = 7.0

        assert node.compute()[0, 1] == 7.0

    def test_view_is_read_only(self):
        """测试只读观察者获得只读视图"""
        v = Variable(Matrix.identity(2))
        node = SourceNode(v)
        view = node.view()

        with pytest.raises(ValueError):
            view[0, 0] = 5.0
        v.value[0, 0] = 5.0
        assert view[0, 0] == 5.0

    def test_rejects_non_variable(self):
        """测试拒绝非 Variable 参数"""
        with pytest.raises(TypeError, match="Variable"):
            SourceNode(Matrix.identity(2))

    def test_clone_shares_variable(self):
        """测试副本引用同一个 Variable"""
        v = Variable(3.0)
        node = SourceNode(v)
        clone = node.clone()

        assert clone is not node
        assert clone.variable is v
        assert copy.deepcopy(node).variable is v


class TestOperationNode:
    """测试 OperationNode"""

    def test_create_operation_node(self):
        """测试创建操作节点"""
        v = Variable(np.array([1, 2, 3]))
        src = SourceNode(v)
        op = OperationNode(lambda x: x * 2, [src], name="multiply")

        assert op.name == "multiply"
        assert len(op.inputs) == 1
        assert isinstance(op.output_type, OpaqueType)

    def test_default_name(self):
        """测试默认名称取函数名"""

        def double(x):
            return x * 2

        op = OperationNode(double, [SourceNode(Variable(1))])
        assert op.name == "double"

    def test_compute_operation_node(self):
        """测试操作节点计算"""
        v = Variable(np.array([1, 2, 3]))
        op = OperationNode(lambda x: x * 2, [SourceNode(v)])

        np.testing.assert_array_equal(op.compute(), [2, 4, 6])

    def test_operation_with_args(self):
        """测试带参数的操作"""

        def scale(x, factor, offset=0):
            return x * factor + offset

        v = Variable(3)
        op = OperationNode(scale, [SourceNode(v)], args=(4,), kwargs={"offset": 1})

        assert op.compute() == 13

    def test_children_evaluated_left_to_right(self):
        """测试子节点从左到右求值"""
        a = Variable(1)
        b = Variable(2)
        op = OperationNode(lambda x, y: (x, y), [SourceNode(a), SourceNode(b)])

        assert op.compute() == (1, 2)

    def test_function_not_called_at_build(self):
        """测试构建节点时不调用函数"""
        calls = []

        def record(x):
            calls.append(x)
            return x

        OperationNode(record, [SourceNode(Variable(1))])
        assert calls == []

    def test_no_caching(self):
        """测试每次求值都完整重算"""
        calls = []

        def record(x):
            calls.append(x)
            return x + 1

        v = Variable(1)
        op = OperationNode(record, [SourceNode(v)])

        assert op.compute() == 2
        v.value = 10
        assert op.compute() == 11
        assert op.compute() == 11
        assert calls == [1, 10, 10]

    def test_exception_propagates(self):
        """测试函数异常向上传播"""
        op = OperationNode(lambda x: x / 0, [SourceNode(Variable(1))])

        with pytest.raises(ZeroDivisionError):
            op.compute()

    def test_rejects_non_node_inputs(self):
        """测试拒绝非节点输入"""
        with pytest.raises(TypeError, match="nodes"):
            OperationNode(lambda x: x, [Variable(1)])

    def test_rejects_non_callable(self):
        """测试拒绝不可调用的操作"""
        with pytest.raises(TypeError, match="callable"):
            OperationNode(42, [SourceNode(Variable(1))])

    def test_inputs_are_copies(self):
        """测试组合节点持有子节点的副本"""
        v = Variable(2)
        src = SourceNode(v)
        op = OperationNode(lambda x, y: x * y, [src, src])

        assert op.inputs[0] is not src
        assert op.inputs[0] is not op.inputs[1]
        assert all(child.variable is v for child in op.inputs)
        assert op.compute() == 4

    def test_clone_is_independent(self):
        """测试深度复制结构, 共享 Variable"""
        v1 = Variable(2.0)
        v2 = Variable(3.0)
        expr = SourceNode(v1) * SourceNode(v2)
        clone = expr.clone()

        assert clone is not expr
        assert clone.inputs[0] is not expr.inputs[0]
        assert clone.inputs[0].variable is v1
        assert clone.compute() == expr.compute() == 6.0

        v1.value = 5.0
        assert clone.compute() == 15.0
        assert copy.deepcopy(expr).compute() == 15.0

    def test_deep_chain(self):
        """测试深链求值不受递归深度限制"""
        v = Variable(1)
        src = SourceNode(v)
        expr = src
        for _ in range(1200):
            expr = expr + src

        assert expr.compute() == 1201
        v.value = 2
        assert expr.clone().compute() == 2402


class TestConstant:
    """测试常量节点"""

    def test_constant_node(self):
        """测试常量节点只读"""
        node = constant(Matrix.identity(2))
        value = node.compute()

        assert value == Matrix.identity(2)
        with pytest.raises(ValueError):
            value[0, 0] = 5.0
        with pytest.raises(TypeError, match="Constant"):
            node.variable.value = Matrix.ones(2, 2)

    def test_constant_copies_value(self):
        """测试常量复制初始值"""
        m = Matrix.identity(2)
        node = constant(m)
        m[0, 0] = 9.0

        assert node.compute()[0, 0] == 1.0


class TestComputationGraph:
    """测试 ComputationGraph"""

    def test_leaf(self):
        """测试单节点图"""
        v = Variable(Matrix.identity(2))
        graph = ComputationGraph.leaf(v)

        assert len(graph) == 1
        assert graph.compute() is v.value

    def test_nodes_topological(self):
        """测试节点按拓扑序排列"""
        v1 = Variable(Matrix.identity(2))
        v2 = Variable(Matrix.ones(2, 2))
        s1 = SourceNode(v1)
        s2 = SourceNode(v2)
        graph = ComputationGraph((s1 + s2) * s1)

        nodes = graph.nodes
        assert len(nodes) == 5
        assert nodes[-1] is graph.root
        positions = {id(node): i for i, node in enumerate(nodes)}
        for node in nodes:
            for child in node.inputs:
                assert positions[id(child)] < positions[id(node)]

    def test_sources_and_variables(self):
        """测试数据源与 Variable 列表"""
        v1 = Variable(Matrix.identity(2))
        v2 = Variable(Matrix.ones(2, 2))
        s1 = SourceNode(v1)
        s2 = SourceNode(v2)
        graph = ComputationGraph((s1 + s2) * s1)

        assert len(graph.sources) == 3
        assert graph.variables == [v1, v2]

    def test_compute(self):
        """测试从根节点求值"""
        v1 = Variable(Matrix(2, 2, 1, 2, 3, 4))
        v2 = Variable(Matrix.identity(2))
        graph = ComputationGraph(SourceNode(v1) + SourceNode(v2))

        assert graph.output_type == MatrixType(2, 2, np.dtype("float64"))
        assert graph.compute() == Matrix(2, 2, 2, 2, 3, 5)

    def test_empty_graph(self):
        """测试空图"""
        graph = ComputationGraph()

        assert graph.nodes == []
        assert len(graph) == 0
        with pytest.raises(ValueError, match="计算图没有根节点"):
            graph.compute()

    def test_node_is_abstract(self):
        """测试 Node 不能直接实例化"""
        with pytest.raises(TypeError):
            Node("node")
