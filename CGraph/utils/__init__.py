"""CGraph 工具模块。"""

from .dtypes import (
    SUPPORTED_DTYPES,
    can_convert,
    cast_scalar,
    check_scalar,
    element_dtype,
    fit_scalar,
    in_range,
    is_scalar,
    require_convertible,
)

__all__ = [
    "SUPPORTED_DTYPES",
    "can_convert",
    "cast_scalar",
    "check_scalar",
    "element_dtype",
    "fit_scalar",
    "in_range",
    "is_scalar",
    "require_convertible",
]
