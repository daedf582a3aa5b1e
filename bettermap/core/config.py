"""
BetterMap 配置管理。

支持从环境变量 (.env) 或代码直接构造。
"""

from __future__ import annotations

import logging
import os
import random
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from bettermap.core.map import DEFAULT_NAME

logger = logging.getLogger("bettermap.config")


def _to_bool(value: Optional[str], default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _to_seed(value: Optional[str]) -> Optional[int]:
    if value is None or not value.strip():
        return None
    try:
        return int(value.strip())
    except ValueError:
        logger.warning("Ignoring non-integer BETTERMAP_SEED: %r", value)
        return None


@dataclass
class MapConfig:
    """BetterMap 默认配置。"""

    # ── 容器 ──
    default_name: str = DEFAULT_NAME
    seed: Optional[int] = None  # random / shuffle 的随机种子

    # ── 调试 ──
    debug: bool = False
    log_file: str = ""

    @classmethod
    def from_env(cls, env_file: str = ".env") -> MapConfig:
        """
        从 .env 文件和环境变量中加载配置。

        环境变量优先级高于 .env 文件。
        """
        load_dotenv(env_file, override=False)

        default_name = os.getenv("BETTERMAP_DEFAULT_NAME", "").strip() or DEFAULT_NAME

        return cls(
            default_name=default_name,
            seed=_to_seed(os.getenv("BETTERMAP_SEED")),
            debug=_to_bool(os.getenv("DEBUG")),
            log_file=os.getenv("LOG_FILE", "").strip(),
        )

    def make_rng(self) -> random.Random:
        """Return a random source seeded with :attr:`seed` (None = system entropy)."""
        return random.Random(self.seed)

    def summary(self) -> str:
        """返回配置摘要。"""
        return (
            f"Default name: {self.default_name}\n"
            f"Seed: {self.seed if self.seed is not None else '未配置'}\n"
            f"Debug: {self.debug}\n"
            f"Log file: {self.log_file or '终端'}"
        )
