"""配置模块

提供 CGraph 的全局配置。
"""

from .matrix_config import (
    MatrixConfig,
    config_context,
    get_config,
    reset_config,
    set_config,
)

__all__ = [
    "MatrixConfig",
    "config_context",
    "get_config",
    "reset_config",
    "set_config",
]
