#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
日志配置模块
提供统一的日志配置和管理
"""

import logging
import logging.handlers
from pathlib import Path
from datetime import datetime
from typing import Optional
from euclid_tiles.config import Config


def setup_logging(config: Optional[Config] = None, name: Optional[str] = None) -> logging.Logger:
    """
    配置日志系统，同时输出到控制台和文件

    Args:
        config: 配置对象（可选）
        name: 日志记录器名称（可选）

    Returns:
        配置好的日志记录器
    """
    if config is None:
        from euclid_tiles.config import get_config
        config = get_config()

    log_level = getattr(logging, str(config.get('logging.level', 'INFO')).upper())
    log_dir = Path(config.get('logging.dir', '~/euclid_logs')).expanduser()
    max_file_size = config.get('logging.max_file_size_mb', 100) * 1024 * 1024  # 转换为字节
    backup_count = config.get('logging.backup_count', 10)
    log_format = config.get('logging.format', '%(asctime)s - %(name)s - %(levelname)s - %(message)s')

    log_dir.mkdir(parents=True, exist_ok=True)

    # 生成日志文件名（按日期）
    log_filename = log_dir / f"euclid_tiles_{datetime.now().strftime('%Y%m%d')}.log"

    logger = logging.getLogger(name) if name else logging.getLogger()
    logger.setLevel(log_level)

    # 已有处理器时不重复添加
    if not logger.handlers:
        formatter = logging.Formatter(log_format, datefmt='%Y-%m-%d %H:%M:%S')

        console_handler = logging.StreamHandler()
        console_handler.setLevel(log_level)
        console_handler.setFormatter(formatter)

        # 文件处理器（支持日志轮转）
        file_handler = logging.handlers.RotatingFileHandler(
            log_filename,
            maxBytes=max_file_size,
            backupCount=backup_count,
            encoding='utf-8'
        )
        file_handler.setLevel(log_level)
        file_handler.setFormatter(formatter)

        logger.addHandler(console_handler)
        logger.addHandler(file_handler)

    return logger
