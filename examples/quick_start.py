"""
CGraph 快速入门示例

展示矩阵运算、可变单元与惰性计算图的基本用法。
"""

import numpy as np

from CGraph import (
    Matrix,
    SourceNode,
    col_vector,
    config_context,
    create_variable,
)


def matrix_basics():
    """矩阵构造与算术运算。"""
    m = Matrix(5, 5, dtype="float32")
    v = col_vector(5, dtype="float32")
    for i in range(5):
        m[i, i] = 1
        v[i] = i
    print(m * v)

    sq = Matrix.identity(2)
    u = col_vector(2, 3.0, 4.0)
    print(sq * u + u)

    a = Matrix(2, 2, 1.0, 2.0, 2.0, 1.0)
    b = Matrix.identity(2)
    for result in (a * b, a + b, a - b, a / 3):
        print(result)

    # 复合赋值原地修改
    a *= 3
    b /= 2
    print(a + b)


def random_matrices():
    """随机矩阵与原地运算。"""
    rmat = Matrix.random(3, 3)
    print(2 * rmat - Matrix.ones(3, 3))
    rmat *= rmat
    print(rmat)
    rmat += rmat
    print(rmat)
    rmat -= rmat
    print(rmat)


def small_integers():
    """int8 元素: 溢出回绕, 标量提升与截断转换。"""
    cmat = Matrix(2, 2, ord("a"), ord("b"), ord("c"), ord("d"), dtype="int8")
    print(cmat * np.int8(2))
    cmat *= 2
    cmat += cmat
    cmat -= cmat
    print(cmat + cmat)

    foo = Matrix(2, 2, ord("A"), ord("B"), ord("C"), ord("D"), dtype="int8")
    print(foo * 2)
    print(foo * 1.15)
    with config_context(scalar_casting="unsafe"):
        foo *= 0.75
        print(foo)
        foo += 1.3
        print(foo)
    print(foo.T)


def lazy_graph():
    """惰性计算图: 修改 Variable 后重新求值。"""
    var1 = create_variable(Matrix.random(3, 3))
    print(var1)

    var2 = create_variable(2 * Matrix.identity(3))

    e1 = SourceNode(var1)
    e2 = SourceNode(var2)
    print(e1())
    print(e2())

    e3 = e1 * e2
    print(f"e3 输出类型: {e3.output_type}")
    print(e3())

    var2.value[0, 0] = 4
    print(e3())


def main():
    """主程序：依次运行各个示例。"""
    print("矩阵基础运算...")
    matrix_basics()

    print("\n随机矩阵...")
    random_matrices()

    print("\nint8 矩阵...")
    small_integers()

    print("\n惰性计算图...")
    lazy_graph()


if __name__ == "__main__":
    main()
