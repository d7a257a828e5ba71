"""随机数生成器与分布采样。

``Matrix.random`` 默认使用进程级共享生成器: 每种位生成器类型一个实例,
首次使用时惰性创建, 之后永不重置。需要可复现结果的调用方应显式传入
自己的 ``numpy.random.Generator``。
"""

import logging
from typing import Any, Callable, Dict, Optional, Tuple, Type, Union

import numpy as np
from scipy import stats

logger = logging.getLogger(__name__)

Distribution = Union[Any, Callable[[np.random.Generator], Any]]

_shared_generators: Dict[Type[np.random.BitGenerator], np.random.Generator] = {}


def shared_generator(
    bit_generator: Type[np.random.BitGenerator] = np.random.PCG64,
) -> np.random.Generator:
    """返回指定位生成器类型的进程级共享生成器。

    Args:
        bit_generator: numpy 位生成器类型, 默认 PCG64

    Returns:
        np.random.Generator: 共享生成器
    """
    generator = _shared_generators.get(bit_generator)
    if generator is None:
        generator = np.random.Generator(bit_generator())
        _shared_generators[bit_generator] = generator
        logger.debug(f"创建共享随机数生成器: {bit_generator.__name__}")
    return generator


def default_distribution() -> Any:
    """默认分布: [0, 1) 上的均匀分布。"""
    return stats.uniform(loc=0.0, scale=1.0)


def sample(
    distribution: Distribution,
    generator: np.random.Generator,
    shape: Tuple[int, int],
) -> np.ndarray:
    """按行优先顺序为每个元素独立采样。

    Args:
        distribution: scipy.stats 冻结分布 (具有 ``rvs``) 或可调用对象
            ``f(generator) -> 标量``
        generator: 随机数生成器
        shape: 采样形状 (rows, cols)

    Returns:
        np.ndarray: 采样结果

    Raises:
        TypeError: distribution 既没有 ``rvs`` 也不可调用
    """
    if hasattr(distribution, "rvs"):
        return np.asarray(distribution.rvs(size=shape, random_state=generator))
    if callable(distribution):
        rows, cols = shape
        return np.array(
            [[distribution(generator) for _ in range(cols)] for _ in range(rows)]
        )
    raise TypeError(
        f"distribution must be a frozen scipy.stats distribution or a callable, "
        f"got {type(distribution).__name__}"
    )


def resolve_generator(
    generator: Optional[np.random.Generator],
) -> np.random.Generator:
    """未指定生成器时回退到共享生成器。"""
    return shared_generator() if generator is None else generator
