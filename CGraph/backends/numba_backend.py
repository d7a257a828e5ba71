"""Numba 后端实现，负责矩阵乘积的 JIT 内核。"""

import numba
import numpy as np


@numba.njit(cache=False)
def _matmul_kernel(lhs, rhs, out):
    rows, inner = lhs.shape
    cols = rhs.shape[1]
    # k 最外层累加, 累加顺序固定
    for k in range(inner):
        for j in range(cols):
            for i in range(rows):
                out[i, j] = out[i, j] + lhs[i, k] * rhs[k, j]


class NumbaBackend:
    """Numba 高性能计算后端。"""

    def matmul(self, lhs: np.ndarray, rhs: np.ndarray, dtype: np.dtype) -> np.ndarray:
        """计算两个二维数组的矩阵乘积。

        两个输入先转换为公共类型 ``dtype``，每一步累加结果都写回该类型，
        整数类型溢出时按回绕处理。

        Args:
            lhs: 左操作数，形状 (m, n)
            rhs: 右操作数，形状 (n, o)
            dtype: 结果元素类型

        Returns:
            np.ndarray: 形状 (m, o) 的乘积
        """
        a = np.ascontiguousarray(lhs, dtype=dtype)
        b = np.ascontiguousarray(rhs, dtype=dtype)
        out = np.zeros((a.shape[0], b.shape[1]), dtype=dtype)
        _matmul_kernel(a, b, out)
        return out


default_backend = NumbaBackend()
