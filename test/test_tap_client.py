#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
测试 TAP 查询模块（pyvo 使用替身）
"""

import numpy as np
import pytest
import pyvo
from astropy.table import Table

from euclid_tiles.core import tap_client
from euclid_tiles.core.tap_client import TapQuery, TapQueryError


class _FakeResults:

    def __init__(self, table):
        self._table = table

    def to_table(self):
        return self._table


class _FakeTAPService:
    table = None
    error = None
    last_call = None

    def __init__(self, baseurl):
        self.baseurl = baseurl

    def run_sync(self, query, maxrec=None):
        _FakeTAPService.last_call = {'baseurl': self.baseurl, 'query': query, 'maxrec': maxrec}
        if self.error is not None:
            raise self.error
        return _FakeResults(self.table)


class _ListSink:

    def __init__(self):
        self.rows = []
        self.ended = 0

    def accept_row(self, row):
        self.rows.append(row)

    def end_rows(self):
        self.ended += 1


def _mosaic_table():
    table = Table()
    table['tile_index'] = np.array([102020553, 102024002], dtype=np.int64)
    table['fov'] = np.array([
        [74.75, -49.25, 75.25, -49.25, 75.25, -48.75, 74.75, -48.75],
        [75.65, -45.65, 76.15, -45.65, 76.15, -45.15, 75.65, -45.15],
    ])
    table['filter_name'] = np.array([b'VIS', b'NIR_H'])
    table['instrument_name'] = ['VIS', 'NISP']
    table['file_name'] = ['a.fits', 'b.fits']
    table['file_path'] = ['/p/VIS', '/p/NISP']
    return table


@pytest.fixture
def fake_service(monkeypatch):
    _FakeTAPService.table = _mosaic_table()
    _FakeTAPService.error = None
    _FakeTAPService.last_call = None
    monkeypatch.setattr(pyvo.dal, 'TAPService', _FakeTAPService)
    return _FakeTAPService


def test_execute_streams_rows(fake_service):
    sink = _ListSink()
    query = TapQuery('https://easotf.esac.esa.int/tap-server/tap', 'SELECT tile_index, fov FROM t', maxrec=5000)

    nrow = query.execute(sink)

    assert nrow == 2
    assert sink.ended == 1
    assert fake_service.last_call == {
        'baseurl': 'https://easotf.esac.esa.int/tap-server/tap',
        'query': 'SELECT tile_index, fov FROM t',
        'maxrec': 5000,
    }

    tile_id, fov, filter_name, instrument, file_name, file_path = sink.rows[0]
    assert tile_id == 102020553
    assert isinstance(tile_id, int)
    assert isinstance(fov, np.ndarray)
    assert fov.shape == (8,)
    assert fov[0] == 74.75
    assert filter_name == 'VIS'
    assert isinstance(filter_name, str)
    assert (instrument, file_name, file_path) == ('VIS', 'a.fits', '/p/VIS')


def test_execute_wraps_service_errors(fake_service):
    fake_service.error = pyvo.dal.DALServiceError("503 Service Unavailable")
    sink = _ListSink()

    with pytest.raises(TapQueryError, match="503"):
        TapQuery('https://easxxx.esac.esa.int/tap-server/tap', 'SELECT 1').execute(sink)

    assert sink.rows == []
    assert sink.ended == 0


def test_execute_wraps_network_errors(fake_service):
    fake_service.error = ConnectionError("Name or service not known")

    with pytest.raises(TapQueryError):
        TapQuery('https://nowhere.invalid/tap', 'SELECT 1').execute(_ListSink())


def test_cell_conversion():
    assert tap_client._cell(np.ma.masked) is None
    assert tap_client._cell(b'VIS') == 'VIS'
    assert tap_client._cell(np.int64(7)) == 7
    assert type(tap_client._cell(np.int64(7))) is int
    values = tap_client._cell(np.ma.array([1, 2, 3, 4], mask=[0, 0, 1, 0]))
    assert np.isnan(values[2])
    assert values[3] == 4.0
    assert tap_client._cell('plain') == 'plain'
