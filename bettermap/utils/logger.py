"""
日志配置工具。

根据 MapConfig 的 debug / log_file 配置 ``bettermap`` Logger，
不改动根 Logger，宿主应用的日志配置保持不变。
"""

from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler
from typing import Optional

from bettermap.core.config import MapConfig

LOG_FORMAT = "%(asctime)s | %(name)s | %(levelname)s | %(message)s"


def setup_logging(
    config: Optional[MapConfig] = None,
    level: int = logging.INFO,
) -> logging.Logger:
    """
    按配置初始化 ``bettermap`` Logger。

    重复调用会替换之前安装的 handler。

    Args:
        config: 读取 ``debug`` 与 ``log_file``；为空时使用默认 MapConfig。
        level: 非 debug 模式下的日志级别。

    Returns:
        ``bettermap`` Logger 实例。
    """
    config = config or MapConfig()
    logger = logging.getLogger("bettermap")
    logger.setLevel(logging.DEBUG if config.debug else level)

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT)
    console = logging.StreamHandler()
    console.setFormatter(formatter)
    logger.addHandler(console)

    # 文件输出
    if config.log_file:
        log_dir = os.path.dirname(config.log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        fh = RotatingFileHandler(
            config.log_file, maxBytes=5 * 1024 * 1024, backupCount=3, encoding="utf-8"
        )
        fh.setFormatter(formatter)
        logger.addHandler(fh)

    return logger
