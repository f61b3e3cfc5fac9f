"""
Coordinate system conversion between WGS-84, GCJ-02 and BD-09.

GCJ-02 is the hub: it is the only system with a primitive edge to both of the
others, so WGS-84 <-> BD-09 is always composed through it. The six ordered
pairs are looked up in a fixed table; there is no path search.
"""
import enum
import math
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from ..exceptions import ConfigError, ValidationError
from ..utils import geo_transforms
from ..utils.geo_transforms import DEFAULT_MAX_ITERATIONS, DEFAULT_TOLERANCE

logger = logging.getLogger(__name__)

LatLng = Tuple[float, float]


class CoordinateSystem(enum.Enum):
    WGS84 = 'WGS-84'
    GCJ02 = 'GCJ-02'
    BD09 = 'BD-09'

    @classmethod
    def parse(cls, value) -> 'CoordinateSystem':
        """Accepts a member or a tag such as 'WGS-84', 'wgs84' or 'bd-09'."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            key = value.strip().upper().replace('-', '').replace('_', '')
            for member in cls:
                if member.value.replace('-', '') == key:
                    return member
        raise ConfigError(f'Unsupported coordinate system: {value!r}')


class Classification(enum.Enum):
    INSIDE_CHINA = 'insideChina'
    OUTSIDE_CHINA = 'outsideChina'


def validate_lat_lng(lat, lng) -> LatLng:
    """Returns (lat, lng) as floats or raises ValidationError."""
    try:
        lat = float(lat)
        lng = float(lng)
    except (TypeError, ValueError):
        raise ValidationError(f'Latitude/longitude must be numbers, got ({lat!r}, {lng!r})')
    if not (math.isfinite(lat) and math.isfinite(lng)):
        raise ValidationError(f'Latitude/longitude must be finite, got ({lat}, {lng})')
    if not -90.0 <= lat <= 90.0:
        raise ValidationError(f'Latitude {lat} is outside [-90, 90]')
    if not -180.0 <= lng <= 180.0:
        raise ValidationError(f'Longitude {lng} is outside [-180, 180]')
    return lat, lng


@dataclass(frozen=True)
class GeoPoint:
    """A latitude/longitude pair and the coordinate system it is expressed in."""
    lat: float
    lng: float
    system: CoordinateSystem

    def __post_init__(self):
        lat, lng = validate_lat_lng(self.lat, self.lng)
        object.__setattr__(self, 'lat', lat)
        object.__setattr__(self, 'lng', lng)
        object.__setattr__(self, 'system', CoordinateSystem.parse(self.system))

    @classmethod
    def _unchecked(cls, lat: float, lng: float, system: CoordinateSystem) -> 'GeoPoint':
        # BD-09 output may step just past +/-180; only inputs are range checked.
        point = object.__new__(cls)
        object.__setattr__(point, 'lat', lat)
        object.__setattr__(point, 'lng', lng)
        object.__setattr__(point, 'system', system)
        return point

    def as_tuple(self) -> LatLng:
        return self.lat, self.lng

    def to(self, system, **options) -> 'GeoPoint':
        return convert_point(self, system, **options)


@dataclass(frozen=True)
class PointBatch:
    """An ordered run of (lat, lng) pairs sharing one coordinate system."""
    points: Tuple[LatLng, ...]
    system: CoordinateSystem

    def __post_init__(self):
        points = tuple(validate_lat_lng(*_unpack(row)) for row in as_rows(self.points))
        object.__setattr__(self, 'points', points)
        object.__setattr__(self, 'system', CoordinateSystem.parse(self.system))

    @classmethod
    def from_columns(cls, lats: Sequence, lngs: Sequence, system) -> 'PointBatch':
        try:
            n_lats, n_lngs = len(lats), len(lngs)
        except TypeError:
            raise ValidationError(f'lats and lngs must be sequences, got {type(lats).__name__} and {type(lngs).__name__}')
        if n_lats != n_lngs:
            raise ValidationError(f'lats and lngs differ in length ({n_lats} != {n_lngs})')
        return cls(tuple(zip(lats, lngs)), system)

    def __len__(self):
        return len(self.points)

    def __iter__(self):
        return (GeoPoint._unchecked(lat, lng, self.system) for lat, lng in self.points)


def as_rows(points) -> tuple:
    """Materialises a batch container, rejecting anything that is not iterable."""
    try:
        return tuple(points)
    except TypeError:
        raise ValidationError(f'A batch must be a sequence of (lat, lng) pairs, got {type(points).__name__}')


def _unpack(row) -> LatLng:
    try:
        lat, lng = row
    except (TypeError, ValueError):
        raise ValidationError(f'Each point must be a (lat, lng) pair, got {row!r}')
    return lat, lng


# --- Primitive edges and routing table ---

INVERSE_OPTIONS = ('tolerance', 'max_iterations')


def resolve_options(options) -> dict:
    """
    Fills in and checks the keyword options a conversion accepts.

    Only the GCJ-02 -> WGS-84 iteration parameters exist; they are accepted on
    every route and checked up front so an unknown or bad option fails the
    same way whichever pair is converted.
    """
    unknown = sorted(set(options) - set(INVERSE_OPTIONS))
    if unknown:
        raise ValidationError(f'Unknown conversion option(s): {", ".join(unknown)}')
    resolved = {
        'tolerance': options.get('tolerance', DEFAULT_TOLERANCE),
        'max_iterations': options.get('max_iterations', DEFAULT_MAX_ITERATIONS),
    }
    geo_transforms.check_iteration_options(**resolved)
    return resolved


def _identity(lat, lng, **options):
    return lat, lng

def _wgs84_to_gcj02(lat, lng, **options):
    return geo_transforms.wgs84_to_gcj02(lat, lng)

def _gcj02_to_wgs84(lat, lng, tolerance=DEFAULT_TOLERANCE, max_iterations=DEFAULT_MAX_ITERATIONS, **options):
    return geo_transforms.gcj02_to_wgs84(lat, lng, tolerance=tolerance, max_iterations=max_iterations)

def _gcj02_to_bd09(lat, lng, **options):
    return geo_transforms.gcj02_to_bd09(lat, lng)

def _bd09_to_gcj02(lat, lng, **options):
    return geo_transforms.bd09_to_gcj02(lat, lng)

def _via_gcj02(first, second):
    def composed(lat, lng, **options):
        return second(*first(lat, lng, **options), **options)
    composed.__name__ = f'{first.__name__}_then_{second.__name__}'
    return composed


WGS84, GCJ02, BD09 = CoordinateSystem.WGS84, CoordinateSystem.GCJ02, CoordinateSystem.BD09

# The two primitive edges, each with its own forward and backward implementation.
CONVERSION_EDGES: Dict[Tuple[CoordinateSystem, CoordinateSystem], Callable] = {
    (WGS84, GCJ02): _wgs84_to_gcj02,
    (GCJ02, WGS84): _gcj02_to_wgs84,
    (GCJ02, BD09): _gcj02_to_bd09,
    (BD09, GCJ02): _bd09_to_gcj02,
}

_ROUTES: Dict[Tuple[CoordinateSystem, CoordinateSystem], Callable] = dict(CONVERSION_EDGES)
_ROUTES[(WGS84, BD09)] = _via_gcj02(_wgs84_to_gcj02, _gcj02_to_bd09)
_ROUTES[(BD09, WGS84)] = _via_gcj02(_bd09_to_gcj02, _gcj02_to_wgs84)


def get_transform(from_sys, to_sys) -> Callable:
    """Looks up the (lat, lng) -> (lat, lng) function for an ordered pair of systems."""
    from_sys = CoordinateSystem.parse(from_sys)
    to_sys = CoordinateSystem.parse(to_sys)
    if from_sys is to_sys:
        return _identity
    return _ROUTES[(from_sys, to_sys)]


# --- Router ---

def convert_point(point: GeoPoint, to_sys, **options) -> GeoPoint:
    options = resolve_options(options)
    transform = get_transform(point.system, to_sys)
    lat, lng = transform(point.lat, point.lng, **options)
    return GeoPoint._unchecked(lat, lng, CoordinateSystem.parse(to_sys))


def convert_points(points: Sequence[GeoPoint], from_sys, to_sys,
                   max_workers: Optional[int] = None, **options) -> List[GeoPoint]:
    """
    Converts a sequence of points, preserving order and length.

    Every point must already be tagged ``from_sys``. When ``max_workers`` is
    given the points are fanned out over a thread pool; results are reassembled
    in input order either way.
    """
    from_sys = CoordinateSystem.parse(from_sys)
    to_sys = CoordinateSystem.parse(to_sys)
    options = resolve_options(options)
    for point in points:
        if point.system is not from_sys:
            raise ValidationError(f'Point {point.as_tuple()} is tagged {point.system.value}, expected {from_sys.value}')
    transform = get_transform(from_sys, to_sys)

    def _convert(point):
        return GeoPoint._unchecked(*transform(point.lat, point.lng, **options), to_sys)

    if max_workers and len(points) > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            return list(executor.map(_convert, points))
    return [_convert(point) for point in points]


# --- Public operations ---

def classify(lat, lng) -> Classification:
    lat, lng = validate_lat_lng(lat, lng)
    if geo_transforms.out_of_china(lat, lng):
        return Classification.OUTSIDE_CHINA
    return Classification.INSIDE_CHINA


def convert(lat, lng, from_sys, to_sys, **options) -> LatLng:
    """Converts a single point and returns the new (lat, lng)."""
    from_sys = CoordinateSystem.parse(from_sys)
    to_sys = CoordinateSystem.parse(to_sys)
    return convert_point(GeoPoint(lat, lng, from_sys), to_sys, **options).as_tuple()


def convert_batch(points: Iterable, from_sys, to_sys,
                  max_workers: Optional[int] = None, **options) -> List[LatLng]:
    """
    Converts an ordered batch of (lat, lng) pairs.

    Every row is validated before any conversion runs; the result has the same
    length and order as ``points``.
    """
    from_sys = CoordinateSystem.parse(from_sys)
    to_sys = CoordinateSystem.parse(to_sys)
    batch = PointBatch(points, from_sys)
    converted = convert_points(list(batch), from_sys, to_sys, max_workers=max_workers, **options)
    logger.debug("Converted %d point(s) %s -> %s", len(converted), from_sys.value, to_sys.value)
    return [point.as_tuple() for point in converted]


def convert_columns(lats: Sequence, lngs: Sequence, from_sys, to_sys,
                    max_workers: Optional[int] = None, **options) -> Tuple[List[float], List[float]]:
    """Same as convert_batch for two parallel columns; returns (lats, lngs)."""
    from_sys = CoordinateSystem.parse(from_sys)
    to_sys = CoordinateSystem.parse(to_sys)
    batch = PointBatch.from_columns(lats, lngs, from_sys)
    converted = convert_points(list(batch), from_sys, to_sys, max_workers=max_workers, **options)
    return [point.lat for point in converted], [point.lng for point in converted]
