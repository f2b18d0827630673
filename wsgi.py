#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Euclid Tile Resolver - WSGI 入口文件
为 Gunicorn 提供标准化的启动接口，例如:
    gunicorn -w 4 wsgi:application
"""

import os
import sys

# 将当前目录添加到 Python 路径，确保所有模块都能正确导入
current_dir = os.path.dirname(os.path.abspath(__file__))
if current_dir not in sys.path:
    sys.path.insert(0, current_dir)

os.environ.setdefault('FLASK_ENV', 'production')

from euclid_tiles.logging_config import setup_logging  # noqa: E402
from flask_app.app import app  # noqa: E402

setup_logging()

# Gunicorn 使用 'application' 变量
application = app

if __name__ == '__main__':
    # 仅当直接运行此脚本时启动开发服务器
    print("启动开发服务器（仅用于测试）...")
    app.run(host='0.0.0.0', port=5000, debug=False)
