from .config import MatrixConfig, config_context, get_config, reset_config, set_config
from .core import (
    ComputationGraph,
    Constant,
    Matrix,
    OperationNode,
    SourceNode,
    Variable,
    col_vector,
    constant,
    create_variable,
    row_vector,
    source,
)
from .errors import (
    CGraphError,
    IndexOutOfRangeError,
    InvalidShapeOperationError,
    ShapeMismatchError,
    TypeNotConvertibleError,
)

__all__ = [
    "Matrix",
    "row_vector",
    "col_vector",
    "Variable",
    "Constant",
    "create_variable",
    "SourceNode",
    "OperationNode",
    "ComputationGraph",
    "source",
    "constant",
    "MatrixConfig",
    "get_config",
    "set_config",
    "reset_config",
    "config_context",
    "CGraphError",
    "ShapeMismatchError",
    "TypeNotConvertibleError",
    "IndexOutOfRangeError",
    "InvalidShapeOperationError",
]
