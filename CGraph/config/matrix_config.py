"""矩阵运算配置

控制默认元素类型、标量转换策略与打印精度。配置对象不可变,
修改通过 ``set_config`` 或 ``config_context`` 生成新实例。
"""

import logging
from contextlib import contextmanager
from typing import Any, Iterator, Literal

import numpy as np
from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..errors import TypeNotConvertibleError
from ..utils.dtypes import element_dtype

logger = logging.getLogger(__name__)


class MatrixConfig(BaseModel):
    """矩阵与计算图的全局配置。"""

    model_config = ConfigDict(frozen=True, extra="forbid")

    default_dtype: str = Field("float64", description="未指定 dtype 时的元素类型")
    scalar_casting: Literal["same_kind", "unsafe"] = Field(
        "same_kind", description="标量写入元素类型时的转换策略"
    )
    print_precision: int = Field(6, ge=1, le=17, description="渲染浮点元素的有效数字位数")

    @field_validator("default_dtype", mode="before")
    @classmethod
    def _validate_dtype(cls, value: Any) -> str:
        try:
            return element_dtype(value).name
        except TypeNotConvertibleError as e:
            raise ValueError(str(e)) from e

    @property
    def dtype(self) -> np.dtype:
        """默认元素类型 (numpy dtype)。"""
        return np.dtype(self.default_dtype)


_config = MatrixConfig()


def get_config() -> MatrixConfig:
    """返回当前生效的配置。"""
    return _config


def set_config(**changes: Any) -> MatrixConfig:
    """校验并替换当前配置。

    Args:
        **changes: 需要修改的字段

    Returns:
        MatrixConfig: 新的配置

    Raises:
        pydantic.ValidationError: 字段取值非法
    """
    global _config
    _config = MatrixConfig(**{**_config.model_dump(), **changes})
    logger.debug(f"更新配置: {changes}")
    return _config


def reset_config() -> MatrixConfig:
    """恢复默认配置。"""
    global _config
    _config = MatrixConfig()
    return _config


@contextmanager
def config_context(**changes: Any) -> Iterator[MatrixConfig]:
    """临时修改配置, 退出时恢复原配置。

    Example:
        >>> with config_context(scalar_casting="unsafe"):
        ...     m = Matrix(2, 2, dtype="int8")
        ...     m *= 0.75
    """
    global _config
    previous = _config
    try:
        yield set_config(**changes)
    finally:
        _config = previous
