import logging

import pytest

from coordconv.exceptions import ConfigError, ValidationError
from coordconv.services.conversion import CoordinateSystem, convert
from coordconv.services.providers import (
    MapProvider, ProviderQuery, BAIDU_COORD_TYPES, prepare_query, normalize_batch,
)


def test_parse_provider():
    assert MapProvider.parse('Google') is MapProvider.GOOGLE
    assert MapProvider.parse(MapProvider.BAIDU) is MapProvider.BAIDU
    with pytest.raises(ConfigError):
        MapProvider.parse('bing')

def test_baidu_coord_types_cover_every_system():
    assert {BAIDU_COORD_TYPES[s] for s in CoordinateSystem} == {'wgs84ll', 'gcj02ll', 'bd09ll'}

@pytest.mark.parametrize('ics, coord_type', [('WGS-84', 'wgs84ll'), ('GCJ-02', 'gcj02ll'), ('BD-09', 'bd09ll')])
def test_baidu_passes_point_through_with_coord_type(ics, coord_type):
    """测试：百度接口不在本地转换坐标，只附带 coordtype"""
    assert prepare_query(39.91103, 116.4337, ics, 'baidu') == ProviderQuery(39.91103, 116.4337, coord_type)

@pytest.mark.parametrize('ics', ['WGS-84', 'GCJ-02', 'BD-09'])
def test_google_converts_to_gcj02_inside_china(ics):
    query = prepare_query(39.90358, 116.421, ics, 'google')
    assert query.coord_type is None
    assert (query.lat, query.lng) == convert(39.90358, 116.421, ics, 'GCJ-02')

def test_google_gcj02_input_is_unchanged_inside_china():
    assert prepare_query(39.90498, 116.4272, 'GCJ-02', 'google') == ProviderQuery(39.90498, 116.4272)

def test_google_outside_china_passes_through(caplog):
    with caplog.at_level(logging.WARNING, logger='coordconv.services.providers'):
        query = prepare_query(51.5, -0.12, 'WGS-84', 'google')
    assert query == ProviderQuery(51.5, -0.12)
    assert not caplog.records

def test_google_outside_china_warns_on_non_wgs84(caplog):
    """测试：国外坐标声明为非 WGS-84 时记录警告并原样传递"""
    with caplog.at_level(logging.WARNING, logger='coordconv.services.providers'):
        query = prepare_query(51.5, -0.12, 'BD-09', 'google')
    assert query == ProviderQuery(51.5, -0.12)
    assert any('WGS-84' in record.getMessage() for record in caplog.records)

def test_prepare_query_validates_input():
    with pytest.raises(ValidationError):
        prepare_query(100, 116.4, 'WGS-84', 'google')
    with pytest.raises(ConfigError):
        prepare_query(39.9, 116.4, 'WGS-72', 'google')

def test_normalize_batch_preserves_order():
    rows = [(39.99837, 116.3203), (51.5, -0.12), (39.98565, 116.2998)]
    queries = normalize_batch(rows, 'WGS-84', 'google')
    assert queries == [prepare_query(lat, lng, 'WGS-84', 'google') for lat, lng in rows]
    assert queries[1] == ProviderQuery(51.5, -0.12)

def test_normalize_batch_rejects_bad_rows_before_converting():
    with pytest.raises(ValidationError):
        normalize_batch([(39.9, 116.4), (39.9,)], 'WGS-84', 'baidu')

@pytest.mark.parametrize('points', [None, 7])
def test_normalize_batch_rejects_non_sequence(points):
    with pytest.raises(ValidationError):
        normalize_batch(points, 'WGS-84', 'google')
