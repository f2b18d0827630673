#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Euclid Tile Resolver - MCP Server (SSE Transport)
符合标准 MCP SSE 协议，支持 N8N MCP Client 节点
"""

import asyncio
import json
import logging
import uuid
from typing import Any, Dict
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from sse_starlette.sse import EventSourceResponse

from mcp.types import Tool

from mcp_server.tools.query_tools import (
    handle_query_tile_id,
    handle_batch_query_tile_ids,
    handle_list_tile_filters,
    handle_get_tile_product
)
from mcp_server.tools.catalog_tools import handle_annotate_catalog

logger = logging.getLogger(__name__)

SERVICE_PROPERTY = {
    "type": "string",
    "description": "Euclid TAP 服务简称（如 otf、idr）或完整 TAP 地址（可选，默认使用配置中的服务）"
}

# 定义工具列表
TOOLS = [
    Tool(
        name="query_tile_id",
        description="根据天体坐标（RA, DEC）查询所在的 Euclid tile_index，位于多个 TILE 内时返回全部并给出编号最小的一个",
        inputSchema={
            "type": "object",
            "properties": {
                "ra": {
                    "type": "number",
                    "description": "赤经（度），范围 0-360"
                },
                "dec": {
                    "type": "number",
                    "description": "赤纬（度），范围 -90 到 90"
                },
                "service": SERVICE_PROPERTY
            },
            "required": ["ra", "dec"]
        }
    ),
    Tool(
        name="batch_query_tile_ids",
        description="批量查询多个坐标对应的 Euclid tile_index",
        inputSchema={
            "type": "object",
            "properties": {
                "coordinates": {
                    "type": "array",
                    "description": "坐标数组，每个元素为 [ra, dec]",
                    "items": {
                        "type": "array",
                        "items": {"type": "number"},
                        "minItems": 2,
                        "maxItems": 2
                    }
                },
                "service": SERVICE_PROPERTY
            },
            "required": ["coordinates"]
        }
    ),
    Tool(
        name="list_tile_filters",
        description="列出某个 TILE 在 sedm.mosaic_product 中已有数据产品的全部波段",
        inputSchema={
            "type": "object",
            "properties": {
                "tile_id": {
                    "type": "integer",
                    "description": "tile_index"
                },
                "service": SERVICE_PROPERTY
            },
            "required": ["tile_id"]
        }
    ),
    Tool(
        name="get_tile_product",
        description="获取某个 TILE 和波段的数据产品文件名、路径以及裁剪服务地址",
        inputSchema={
            "type": "object",
            "properties": {
                "tile_id": {
                    "type": "integer",
                    "description": "tile_index"
                },
                "filter": {
                    "type": "string",
                    "description": "波段名，如 VIS、NIR_H、DECAM_g"
                },
                "service": SERVICE_PROPERTY
            },
            "required": ["tile_id", "filter"]
        }
    ),
    Tool(
        name="annotate_catalog",
        description="为 FITS、VOTable 或 CSV 星表中的每个源添加 TILE_INDEX 和 N_TILES 列并写出新文件",
        inputSchema={
            "type": "object",
            "properties": {
                "catalog_path": {
                    "type": "string",
                    "description": "星表文件的完整路径"
                },
                "output_path": {
                    "type": "string",
                    "description": "输出文件路径（可选，默认在原文件名后加 _tiles）"
                },
                "ra_col": {
                    "type": "string",
                    "description": "RA 列名（可选，自动检测）"
                },
                "dec_col": {
                    "type": "string",
                    "description": "DEC 列名（可选，自动检测）"
                },
                "service": SERVICE_PROPERTY
            },
            "required": ["catalog_path"]
        }
    )
]

# 工具处理函数映射
TOOL_HANDLERS = {
    "query_tile_id": handle_query_tile_id,
    "batch_query_tile_ids": handle_batch_query_tile_ids,
    "list_tile_filters": handle_list_tile_filters,
    "get_tile_product": handle_get_tile_product,
    "annotate_catalog": handle_annotate_catalog
}

MCP_PROTOCOL_VERSION = "2024-11-05"
SERVER_INFO = {"name": "euclid-tiles-service", "version": "1.0.0"}

# 存储每个会话的消息队列
sessions: Dict[str, asyncio.Queue] = {}


def _rpc_result(request_id: Any, result: Dict[str, Any]) -> Dict[str, Any]:
    return {"jsonrpc": "2.0", "id": request_id, "result": result}


def _rpc_error(request_id: Any, code: int, message: str) -> Dict[str, Any]:
    return {"jsonrpc": "2.0", "id": request_id, "error": {"code": code, "message": message}}


async def dispatch_request(data: Dict[str, Any]) -> Dict[str, Any]:
    """
    处理一个 JSON-RPC 请求

    Args:
        data: 请求体 {method, params?, id?}

    Returns:
        JSON-RPC 响应
    """
    method = data.get("method")
    params = data.get("params") or {}
    request_id = data.get("id")

    if method == "initialize":
        return _rpc_result(request_id, {
            "protocolVersion": MCP_PROTOCOL_VERSION,
            "capabilities": {"tools": {}},
            "serverInfo": SERVER_INFO
        })

    if method == "tools/list":
        return _rpc_result(request_id, {
            "tools": [
                {
                    "name": tool.name,
                    "description": tool.description,
                    "inputSchema": tool.inputSchema
                }
                for tool in TOOLS
            ]
        })

    if method == "tools/call":
        tool_name = params.get("name")
        arguments = params.get("arguments") or {}
        logger.info(f"调用工具: {tool_name}")

        handler = TOOL_HANDLERS.get(tool_name)
        if handler is None:
            return _rpc_error(request_id, -32601, f"未知工具: {tool_name}")

        try:
            result = await handler(arguments)
        except Exception as e:
            logger.error(f"工具执行失败: {e}", exc_info=True)
            return _rpc_error(request_id, -32603, f"工具执行失败: {str(e)}")

        return _rpc_result(request_id, {
            "content": [
                {
                    "type": "text",
                    "text": json.dumps(result, ensure_ascii=False, indent=2)
                }
            ]
        })

    return _rpc_error(request_id, -32601, f"未知方法: {method}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """应用生命周期管理"""
    logger.info("🚀 启动 Euclid Tile Resolver MCP 服务器 (SSE Transport)")
    logger.info(f"📦 提供 {len(TOOLS)} 个工具:")
    for tool in TOOLS:
        logger.info(f"  - {tool.name}")
    yield
    logger.info("🛑 关闭 MCP 服务器")


# 创建 FastAPI 应用
app = FastAPI(
    title="Euclid Tile Resolver MCP Service",
    description="MCP 服务，提供 Euclid TILE 坐标查询和数据产品查询功能 (SSE Transport)",
    version="1.0.0",
    lifespan=lifespan
)

# 配置 CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/")
async def root():
    """根路径 - 服务信息"""
    return {
        "service": "Euclid Tile Resolver MCP Service",
        "version": SERVER_INFO["version"],
        "protocol": "MCP over SSE",
        "transport": "sse",
        "endpoint": "/sse",
        "tools": [tool.name for tool in TOOLS],
        "mcp_version": MCP_PROTOCOL_VERSION
    }


@app.get("/health")
async def health():
    """健康检查"""
    return {"status": "healthy", "service": "euclid-tiles-mcp", "transport": "sse"}


@app.get("/sse")
async def sse_endpoint(request: Request):
    """
    SSE 端点 - 客户端通过 GET 建立连接，服务器通过此连接推送响应
    """
    session_id = str(uuid.uuid4())
    message_queue: asyncio.Queue = asyncio.Queue()
    sessions[session_id] = message_queue

    logger.info(f"新的 SSE 连接: {session_id}")

    async def event_generator():
        try:
            # 告诉客户端 POST 地址
            yield {"event": "endpoint", "data": f"/sse?sessionId={session_id}"}

            while not await request.is_disconnected():
                try:
                    message = await asyncio.wait_for(message_queue.get(), timeout=30.0)
                    yield {"event": "message", "data": json.dumps(message)}
                except asyncio.TimeoutError:
                    # 心跳
                    yield {"event": "ping", "data": ""}

            logger.info(f"客户端断开连接: {session_id}")
        finally:
            sessions.pop(session_id, None)
            logger.info(f"清理会话: {session_id}")

    return EventSourceResponse(event_generator())


@app.post("/sse")
async def sse_post_endpoint(request: Request):
    """
    SSE POST 端点 - 接收客户端的 JSON-RPC 请求，响应通过 SSE 连接返回
    """
    session_id = request.query_params.get("sessionId")

    if not session_id or session_id not in sessions:
        logger.error(f"无效的 sessionId: {session_id}")
        message = "Missing sessionId parameter" if not session_id else "Invalid sessionId"
        return JSONResponse(status_code=400, content=_rpc_error(None, -32000, message))

    try:
        data = await request.json()
    except ValueError as e:
        logger.error(f"请求解析失败: {e}")
        return JSONResponse(status_code=400, content=_rpc_error(None, -32700, f"Parse error: {e}"))
    if not isinstance(data, dict):
        return JSONResponse(status_code=400, content=_rpc_error(None, -32600, "Invalid Request"))

    logger.info(f"收到请求 [session={session_id}]: {data.get('method')}")

    response = await dispatch_request(data)
    await sessions[session_id].put(response)

    return JSONResponse(status_code=202, content={"status": "accepted"})


if __name__ == "__main__":
    import uvicorn
    from euclid_tiles.config import get_config
    from euclid_tiles.logging_config import setup_logging

    setup_logging()
    config = get_config()
    host = config.get('mcp.host', '0.0.0.0')
    port = config.get('mcp.port', 8000)

    logger.info(f"🌐 启动 SSE 服务器: http://{host}:{port}")
    logger.info(f"📡 SSE 端点: http://{host}:{port}/sse")

    uvicorn.run(app, host=host, port=port, log_level="info")
