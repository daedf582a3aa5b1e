"""
BetterMap — 保持插入顺序的 Map，附带类数组操作。

在 dict 之上提供按位置访问、函数式操作、随机抽样/排序，
以及 combine / union / intersect 等多容器组合操作。

Quick Start:
    from bettermap import BetterMap

    people = BetterMap("People")
    people.set("Doraemon", 10).set("Dora", 28).set("Pikachu", 7)

    people.first()                          # 10
    people.sort(lambda a, b, *_: a - b)     # Pikachu -> Doraemon -> Dora
    adults, kids = people.split(lambda v, k: v >= 18)
"""

__version__ = "0.1.0"

from bettermap.core.map import BetterMap, BetterMapError, EntryShapeError, DEFAULT_NAME
from bettermap.core.config import MapConfig
from bettermap.utils.logger import setup_logging

__all__ = [
    "BetterMap",
    "BetterMapError",
    "EntryShapeError",
    "DEFAULT_NAME",
    "MapConfig",
    "setup_logging",
    "__version__",
]
