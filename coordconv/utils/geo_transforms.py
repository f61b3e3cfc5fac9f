import math
import logging

from ..exceptions import ValidationError

logger = logging.getLogger(__name__)

X_PI = math.pi * 3000.0 / 180.0
# 克拉索夫斯基椭球参数
A = 6378245.0
EE = 0.00669342162296594323

# 中国范围外包矩形 (含边界)
CHINA_MIN_LNG = 72.004
CHINA_MAX_LNG = 137.8347
CHINA_MIN_LAT = 0.8293
CHINA_MAX_LAT = 55.8271

DEFAULT_TOLERANCE = 1e-9
DEFAULT_MAX_ITERATIONS = 10


def out_of_china(lat, lng):
    """
    判断是否在国内，不在国内不做偏移
    """
    return not (CHINA_MIN_LNG <= lng <= CHINA_MAX_LNG and CHINA_MIN_LAT <= lat <= CHINA_MAX_LAT)

def transform_lat(x, y):
    """
    GCJ02 纬度偏移量, x = lng - 105, y = lat - 35
    """
    ret = -100.0 + 2.0 * x + 3.0 * y + 0.2 * y * y + \
          0.1 * x * y + 0.2 * math.sqrt(abs(x))
    ret += (20.0 * math.sin(6.0 * x * math.pi) + 20.0 * \
            math.sin(2.0 * x * math.pi)) * 2.0 / 3.0
    ret += (20.0 * math.sin(y * math.pi) + 40.0 * \
            math.sin(y / 3.0 * math.pi)) * 2.0 / 3.0
    ret += (160.0 * math.sin(y / 12.0 * math.pi) + 320 * \
            math.sin(y * math.pi / 30.0)) * 2.0 / 3.0
    return ret

def transform_lng(x, y):
    """
    GCJ02 经度偏移量, x = lng - 105, y = lat - 35
    """
    ret = 300.0 + x + 2.0 * y + 0.1 * x * x + \
          0.1 * x * y + 0.1 * math.sqrt(abs(x))
    ret += (20.0 * math.sin(6.0 * x * math.pi) + 20.0 * \
            math.sin(2.0 * x * math.pi)) * 2.0 / 3.0
    ret += (20.0 * math.sin(x * math.pi) + 40.0 * \
            math.sin(x / 3.0 * math.pi)) * 2.0 / 3.0
    ret += (150.0 * math.sin(x / 12.0 * math.pi) + 300.0 * \
            math.sin(x / 30.0 * math.pi)) * 2.0 / 3.0
    return ret

def _offset(lat, lng):
    """按椭球曲率半径缩放后的 (dlat, dlng)，单位为度"""
    dlat = transform_lat(lng - 105.0, lat - 35.0)
    dlng = transform_lng(lng - 105.0, lat - 35.0)
    radlat = lat / 180.0 * math.pi
    magic = math.sin(radlat)
    magic = 1 - EE * magic * magic
    sqrtmagic = math.sqrt(magic)
    dlat = (dlat * 180.0) / ((A * (1 - EE)) / (magic * sqrtmagic) * math.pi)
    dlng = (dlng * 180.0) / (A / sqrtmagic * math.cos(radlat) * math.pi)
    return dlat, dlng

def wgs84_to_gcj02(lat, lng):
    """
    WGS84转GCJ02(火星坐标系)
    """
    if out_of_china(lat, lng):
        return lat, lng

    dlat, dlng = _offset(lat, lng)
    return lat + dlat, lng + dlng

def check_iteration_options(tolerance, max_iterations):
    """校验 GCJ02 -> WGS84 迭代参数"""
    if max_iterations < 1:
        raise ValidationError(f'max_iterations 必须 >= 1, 实际为 {max_iterations}')
    if not tolerance > 0:
        raise ValidationError(f'tolerance 必须 > 0, 实际为 {tolerance}')

def gcj02_to_wgs84(lat, lng, tolerance=DEFAULT_TOLERANCE, max_iterations=DEFAULT_MAX_ITERATIONS):
    """
    GCJ02(火星坐标系)转GPS84

    正向偏移没有解析逆，这里以输入点为初值做不动点迭代：
    每一步把当前估计值正向偏移，再减去与输入点之间的差。
    相邻两次估计的经纬度变化都小于 tolerance，或达到 max_iterations 次时停止。
    max_iterations=1 即单步修正 (2 * gcj - wgs84_to_gcj02(gcj))。

    靠近外包矩形边界时估计值可能跳出矩形，正向偏移在矩形外不生效，
    迭代会在两个点之间来回摆动而不收敛。此时返回已评估估计值中
    残差 |wgs84_to_gcj02(w) - gcj| 最小的一个，并记录警告。
    """
    check_iteration_options(tolerance, max_iterations)

    if out_of_china(lat, lng):
        return lat, lng

    wgs_lat, wgs_lng = lat, lng
    best = None
    converged = False
    for iteration in range(1, max_iterations + 1):
        gcj_lat, gcj_lng = wgs84_to_gcj02(wgs_lat, wgs_lng)
        residual = max(abs(gcj_lat - lat), abs(gcj_lng - lng))
        if best is None or residual < best[0]:
            best = (residual, wgs_lat, wgs_lng)
        next_lat = wgs_lat - (gcj_lat - lat)
        next_lng = wgs_lng - (gcj_lng - lng)
        converged = abs(next_lat - wgs_lat) < tolerance and abs(next_lng - wgs_lng) < tolerance
        wgs_lat, wgs_lng = next_lat, next_lng
        if converged:
            break
    logger.debug("gcj02_to_wgs84(%s, %s) finished after %d iteration(s)", lat, lng, iteration)

    if not converged and max_iterations > 1:
        gcj_lat, gcj_lng = wgs84_to_gcj02(wgs_lat, wgs_lng)
        residual = max(abs(gcj_lat - lat), abs(gcj_lng - lng))
        if residual < best[0]:
            best = (residual, wgs_lat, wgs_lng)
        logger.warning("gcj02_to_wgs84(%s, %s) 未在 %d 次迭代内收敛，返回残差最小的估计值 (残差 %.3g 度)",
                       lat, lng, max_iterations, best[0])
        return best[1], best[2]
    return wgs_lat, wgs_lng

def gcj02_to_bd09(lat, lng):
    """
    火星坐标系(GCJ-02)转百度坐标系(BD-09)
    """
    x = lng
    y = lat
    z = math.sqrt(x * x + y * y) + 0.00002 * math.sin(y * X_PI)
    theta = math.atan2(y, x) + 0.000003 * math.cos(x * X_PI)
    bd_lng = z * math.cos(theta) + 0.0065
    bd_lat = z * math.sin(theta) + 0.006
    return bd_lat, bd_lng

def bd09_to_gcj02(lat, lng):
    """
    百度坐标系(BD-09)转火星坐标系(GCJ-02)
    """
    x = lng - 0.0065
    y = lat - 0.006
    z = math.sqrt(x * x + y * y) - 0.00002 * math.sin(y * X_PI)
    theta = math.atan2(y, x) - 0.000003 * math.cos(x * X_PI)
    gg_lng = z * math.cos(theta)
    gg_lat = z * math.sin(theta)
    return gg_lat, gg_lng
