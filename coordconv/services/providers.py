import enum
import logging
from typing import Iterable, List, NamedTuple, Optional

from ..exceptions import ConfigError
from ..utils import geo_transforms
from .conversion import CoordinateSystem, PointBatch, validate_lat_lng, convert

logger = logging.getLogger(__name__)


class MapProvider(enum.Enum):
    GOOGLE = 'google'
    BAIDU = 'baidu'

    @classmethod
    def parse(cls, value) -> 'MapProvider':
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        raise ConfigError(f'Unsupported map provider: {value!r}')


# 百度逆地理编码接口的 coordtype 参数
BAIDU_COORD_TYPES = {
    CoordinateSystem.WGS84: 'wgs84ll',
    CoordinateSystem.GCJ02: 'gcj02ll',
    CoordinateSystem.BD09: 'bd09ll',
}


class ProviderQuery(NamedTuple):
    lat: float
    lng: float
    coord_type: Optional[str] = None


def prepare_query(lat, lng, ics, provider) -> ProviderQuery:
    """
    将调用方给出的坐标整理成地图服务商期望的坐标。

    - Google: 国内坐标统一转换为 GCJ-02；国外坐标原样传递，且只能是 WGS-84。
    - 百度: 坐标原样传递，由 coordtype 告知服务端输入坐标系。
    """
    ics = CoordinateSystem.parse(ics)
    provider = MapProvider.parse(provider)
    lat, lng = validate_lat_lng(lat, lng)

    if provider is MapProvider.BAIDU:
        return ProviderQuery(lat, lng, BAIDU_COORD_TYPES[ics])

    if geo_transforms.out_of_china(lat, lng):
        if ics is not CoordinateSystem.WGS84:
            logger.warning("坐标 (%s, %s) 位于国外，输入坐标系只能为 WGS-84，已忽略 %s", lat, lng, ics.value)
        return ProviderQuery(lat, lng)

    gcj_lat, gcj_lng = convert(lat, lng, ics, CoordinateSystem.GCJ02)
    return ProviderQuery(gcj_lat, gcj_lng)


def normalize_batch(points: Iterable, ics, provider) -> List[ProviderQuery]:
    """逐行调用 prepare_query，保持输入顺序"""
    ics = CoordinateSystem.parse(ics)
    provider = MapProvider.parse(provider)
    batch = PointBatch(points, ics)
    return [prepare_query(lat, lng, ics, provider) for lat, lng in batch.points]
