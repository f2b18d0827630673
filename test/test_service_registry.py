#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
测试服务名解析和服务注册表
"""

import threading
import time
from concurrent.futures import ThreadPoolExecutor

from euclid_tiles.core.service_registry import ServiceRegistry, get_registry, set_registry
from euclid_tiles.models.service import ServiceIdentity, UNKNOWN_NICKNAME

from conftest import OTF_TAP_URL, SYNTHETIC_ROWS, FakeReader


def test_nickname_expands_to_tap_url():
    identity = ServiceIdentity.from_name('otf')
    assert identity.tap_url == 'https://easotf.esac.esa.int/tap-server/tap'
    assert identity.nickname == 'otf'

    identity = ServiceIdentity.from_name('idr')
    assert identity.tap_url == 'https://easidr.esac.esa.int/tap-server/tap'


def test_nickname_character_class():
    for name in ('otf', 'OTF', 'q1_test', 'pdr-2', '123'):
        identity = ServiceIdentity.from_name(name)
        assert identity.nickname == name
        assert identity.tap_url == f'https://eas{name}.esac.esa.int/tap-server/tap'


def test_url_is_used_verbatim():
    url = 'https://easotf.esac.esa.int/tap-server/tap'
    identity = ServiceIdentity.from_name(url)
    assert identity.tap_url == url
    assert identity.nickname == UNKNOWN_NICKNAME == '???'


def test_other_strings_are_used_verbatim():
    identity = ServiceIdentity.from_name('otf!')
    assert identity.tap_url == 'otf!'
    assert identity.nickname == '???'

    identity = ServiceIdentity.from_name('')
    assert identity.tap_url == ''
    assert identity.nickname == '???'


def test_custom_domain():
    identity = ServiceIdentity.from_name('otf', 'example.org')
    assert identity.tap_url == 'https://easotf.example.org/tap-server/tap'


def test_get_service_does_not_query(registry, reader):
    service = registry.get_service('otf')
    assert service.identity.tap_url == OTF_TAP_URL
    assert not service.loaded
    assert reader.calls == []
    assert registry.get_service('otf') is service


def test_index_is_built_once(registry, reader):
    first = registry.get_index('otf')
    second = registry.get_index('otf')
    assert first is second
    assert len(first) == 3
    assert reader.calls == ['otf']
    assert registry.get_service('otf').loaded


def test_service_names_are_case_sensitive(registry, reader):
    registry.get_index('otf')
    registry.get_index('OTF')
    assert reader.calls == ['otf', 'OTF']
    assert registry.known_services() == ['OTF', 'otf']
    # OTF 展开为 easOTF，合成数据中没有该地址
    assert len(registry.get_index('OTF')) == 0


def test_unknown_service_is_empty(registry):
    assert len(registry.get_index('nosuchservice')) == 0
    assert len(registry.get_index('not a url at all')) == 0


def test_concurrent_first_access_queries_once(config):
    started = threading.Event()

    class SlowReader(FakeReader):

        def __call__(self, identity, config):
            started.set()
            time.sleep(0.2)
            return super().__call__(identity, config)

    reader = SlowReader({OTF_TAP_URL: SYNTHETIC_ROWS})
    registry = ServiceRegistry(reader=reader, config=config)
    nthread = 16
    barrier = threading.Barrier(nthread)

    def worker():
        barrier.wait()
        return registry.get_index('otf')

    with ThreadPoolExecutor(max_workers=nthread) as pool:
        futures = [pool.submit(worker) for _ in range(nthread)]
        indexes = [f.result() for f in futures]

    assert started.is_set()
    assert reader.calls == ['otf']
    assert all(index is indexes[0] for index in indexes)
    assert all(len(index) == 3 for index in indexes)


def test_concurrent_access_to_different_services(config):
    reader = FakeReader({OTF_TAP_URL: SYNTHETIC_ROWS})
    registry = ServiceRegistry(reader=reader, config=config)
    names = ['otf', 'idr', 'otf', 'idr'] * 8

    with ThreadPoolExecutor(max_workers=8) as pool:
        sizes = list(pool.map(lambda name: len(registry.get_index(name)), names))

    assert sorted(reader.calls) == ['idr', 'otf']
    assert sizes == [3, 0, 3, 0] * 8


def test_global_registry(registry):
    assert get_registry() is registry
    set_registry(None)
    fresh = get_registry()
    assert fresh is not registry
    assert get_registry() is fresh


def test_reader_failure_caches_empty_index(config):
    calls = []

    def failing_reader(identity, config):
        calls.append(identity.name)
        raise RuntimeError('connection reset')

    registry = ServiceRegistry(reader=failing_reader, config=config)

    assert len(registry.get_index('otf')) == 0
    assert len(registry.get_index('otf')) == 0
    assert registry.get_service('otf').loaded
    assert calls == ['otf']


def test_identity_keeps_domain():
    identity = ServiceIdentity.from_name('otf', 'example.org')
    assert identity.domain == 'example.org'
    assert identity.cutout_base_url == 'https://easotf.example.org/sas-cutout/cutout'

    identity = ServiceIdentity.from_name('https://example.org/tap')
    assert identity.domain == 'esac.esa.int'
    assert identity.cutout_base_url == 'https://eas???.esac.esa.int/sas-cutout/cutout'
