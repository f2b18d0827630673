#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
TAP服务标识
将用户给出的服务名（简称或完整URL）解析为 TAP 地址和服务简称
"""

import re
from dataclasses import dataclass

# 简称只允许字母、数字、下划线和连字符
NICKNAME_PATTERN = re.compile(r'[A-Za-z0-9_-]+')

# 无法确定简称时使用的占位符
UNKNOWN_NICKNAME = '???'

DEFAULT_DOMAIN = 'esac.esa.int'


@dataclass(frozen=True)
class ServiceIdentity:
    """一个 Euclid 归档 TAP 服务"""
    name: str
    tap_url: str
    nickname: str
    domain: str = DEFAULT_DOMAIN

    @property
    def cutout_base_url(self) -> str:
        """裁剪服务地址，与 TAP 地址使用同一域名"""
        return f"https://eas{self.nickname}.{self.domain}/sas-cutout/cutout"

    @classmethod
    def from_name(cls, name: str, domain: str = DEFAULT_DOMAIN) -> 'ServiceIdentity':
        """
        解析服务名

        "otf"、"idr" 这类简称会展开为 https://eas<简称>.<domain>/tap-server/tap；
        其它字符串直接作为 TAP 地址使用，简称记为 "???"。

        Args:
            name: 服务简称或 TAP 地址
            domain: 简称展开时使用的域名

        Returns:
            ServiceIdentity实例
        """
        if NICKNAME_PATTERN.fullmatch(name):
            return cls(name=name, tap_url=nickname_tap_url(name, domain), nickname=name, domain=domain)
        return cls(name=name, tap_url=name, nickname=UNKNOWN_NICKNAME, domain=domain)


def nickname_tap_url(nickname: str, domain: str = DEFAULT_DOMAIN) -> str:
    return f"https://eas{nickname}.{domain}/tap-server/tap"
