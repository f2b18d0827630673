#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
星表相关的 MCP 工具
"""

import asyncio
import logging
from pathlib import Path
from typing import Any, Dict

from euclid_tiles.core.catalog_processor import annotate_catalog

logger = logging.getLogger(__name__)


async def handle_annotate_catalog(arguments: Dict[str, Any]) -> Dict[str, Any]:
    """
    处理 annotate_catalog 工具调用

    Args:
        arguments: 工具参数 {catalog_path, output_path?, ra_col?, dec_col?, service?}

    Returns:
        结果字典
    """
    try:
        catalog_path = Path(arguments['catalog_path'])
        output_path = arguments.get('output_path') or str(
            catalog_path.with_name(f"{catalog_path.stem}_tiles{catalog_path.suffix}")
        )

        stats = await asyncio.to_thread(
            annotate_catalog,
            str(catalog_path),
            output_path,
            ra_col=arguments.get('ra_col'),
            dec_col=arguments.get('dec_col'),
            service_name=arguments.get('service')
        )

        return {
            'success': True,
            'catalog_path': str(catalog_path),
            **stats,
            'message': f'{stats["num_rows"]} 个源中 {stats["num_matched"]} 个位于 Euclid TILE 内'
        }

    except Exception as e:
        logger.error(f"annotate_catalog 执行失败: {e}", exc_info=True)
        return {
            'success': False,
            'error': str(e),
            'message': f'星表处理失败: {e}'
        }
