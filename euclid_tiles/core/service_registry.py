#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
服务注册模块
每个服务名对应一个 Service，首次使用时读取TILE索引，之后在进程生命周期内一直复用

并发首次访问同一服务时只会执行一次远程查询，其它调用方等待并共享同一个已完成的索引。
"""

import logging
import threading
from typing import Callable, Dict, List, Optional

from euclid_tiles.config import Config, get_config
from euclid_tiles.core.tile_index import TileIndex, read_tile_index
from euclid_tiles.models.service import ServiceIdentity

logger = logging.getLogger(__name__)

TileIndexReader = Callable[[ServiceIdentity, Config], TileIndex]


class Service:
    """一个 TAP 服务及其延迟构建的TILE索引"""

    def __init__(self, identity: ServiceIdentity, reader: TileIndexReader, config: Config):
        self.identity = identity
        self._reader = reader
        self._config = config
        self._index: Optional[TileIndex] = None
        self._lock = threading.Lock()

    @property
    def name(self) -> str:
        return self.identity.name

    @property
    def nickname(self) -> str:
        return self.identity.nickname

    @property
    def loaded(self) -> bool:
        return self._index is not None

    def get_index(self) -> TileIndex:
        """返回TILE索引，首次调用时读取"""
        index = self._index
        if index is None:
            with self._lock:
                if self._index is None:
                    logger.info(f"首次使用服务 {self.name}，读取TILE索引: {self.identity.tap_url}")
                    try:
                        self._index = self._reader(self.identity, self._config)
                    except Exception as e:
                        logger.error(f"读取TILE索引失败 [{self.name}]，使用空索引: {e}", exc_info=True)
                        self._index = TileIndex.empty()
                index = self._index
        return index


class ServiceRegistry:
    """服务名到 Service 的进程级缓存，条目不会被移除或刷新"""

    def __init__(self, reader: TileIndexReader = read_tile_index, config: Optional[Config] = None):
        """
        Args:
            reader: 根据服务标识读取TILE索引的函数
            config: 配置对象（可选）
        """
        self._reader = reader
        self._config = config
        self._services: Dict[str, Service] = {}
        self._lock = threading.Lock()

    @property
    def config(self) -> Config:
        return self._config if self._config is not None else get_config()

    def get_service(self, service_name: str) -> Service:
        """
        获取服务，不存在时创建（不会触发远程查询）

        Args:
            service_name: 服务简称或 TAP 地址，区分大小写

        Returns:
            Service实例
        """
        service = self._services.get(service_name)
        if service is None:
            with self._lock:
                service = self._services.get(service_name)
                if service is None:
                    config = self.config
                    identity = ServiceIdentity.from_name(service_name, config.get('tap.domain'))
                    service = Service(identity, self._reader, config)
                    self._services[service_name] = service
        return service

    def get_index(self, service_name: str) -> TileIndex:
        return self.get_service(service_name).get_index()

    def known_services(self) -> List[str]:
        with self._lock:
            return sorted(self._services)


# 全局服务注册表（延迟创建）
_global_registry: Optional[ServiceRegistry] = None
_global_registry_lock = threading.Lock()


def get_registry() -> ServiceRegistry:
    """获取全局服务注册表"""
    global _global_registry
    if _global_registry is None:
        with _global_registry_lock:
            if _global_registry is None:
                _global_registry = ServiceRegistry()
    return _global_registry


def set_registry(registry: Optional[ServiceRegistry]):
    """设置全局服务注册表（None 表示下次使用时重新创建）"""
    global _global_registry
    with _global_registry_lock:
        _global_registry = registry
