"""计算后端。"""

from .numba_backend import NumbaBackend, default_backend

__all__ = ["NumbaBackend", "default_backend"]
