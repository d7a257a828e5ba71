"""CGraph 核心模块，提供矩阵容器、可变单元和计算图实现。"""

from .computation_graph import (
    ComputationGraph,
    Node,
    OperationNode,
    SourceNode,
    constant,
    source,
)
from .matrix import Matrix, col_vector, row_vector
from .operators import build_binary
from .output_types import MatrixType, OpaqueType, ScalarType, infer_binary, type_of
from .rng import shared_generator
from .variable import Constant, Variable, create_variable

__all__ = [
    "ComputationGraph",
    "Node",
    "OperationNode",
    "SourceNode",
    "constant",
    "source",
    "Matrix",
    "col_vector",
    "row_vector",
    "build_binary",
    "MatrixType",
    "OpaqueType",
    "ScalarType",
    "infer_binary",
    "type_of",
    "shared_generator",
    "Constant",
    "Variable",
    "create_variable",
]
