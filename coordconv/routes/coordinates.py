from flask import Blueprint, request, jsonify, current_app

from ..exceptions import ValidationError
from ..services import conversion
from ..services.conversion import CoordinateSystem
from ..utils.log_context import log_context

coords_bp = Blueprint('coords', __name__, url_prefix='/coords')


def _inverse_options():
    """GCJ-02 -> WGS-84 迭代参数，来自应用配置"""
    return {
        'tolerance': current_app.config['INVERSE_TOLERANCE'],
        'max_iterations': current_app.config['INVERSE_MAX_ITERATIONS'],
    }

def _needs_inverse(from_sys, to_sys):
    return to_sys is CoordinateSystem.WGS84 and from_sys is not CoordinateSystem.WGS84

def _json_body():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError('请求体必须是 JSON 对象')
    return data

def _systems(data):
    from_sys = CoordinateSystem.parse(data.get('from'))
    to_sys = CoordinateSystem.parse(data.get('to'))
    return from_sys, to_sys


@coords_bp.route('/systems', methods=['GET'])
def list_systems():
    """列出支持的坐标系"""
    return jsonify({'success': True, 'systems': [s.value for s in CoordinateSystem]})

@coords_bp.route('/classify', methods=['GET'])
def classify():
    lat = request.args.get('lat')
    lng = request.args.get('lng')
    result = conversion.classify(lat, lng)
    return jsonify({'success': True, 'classification': result.value})

@coords_bp.route('/convert', methods=['POST'])
def convert():
    """单点坐标转换"""
    data = _json_body()
    from_sys, to_sys = _systems(data)
    options = _inverse_options() if _needs_inverse(from_sys, to_sys) else {}

    with log_context(f'convert {from_sys.value}->{to_sys.value}'):
        lat, lng = conversion.convert(data.get('lat'), data.get('lng'), from_sys, to_sys, **options)
        current_app.logger.debug(f"({data.get('lat')}, {data.get('lng')}) -> ({lat}, {lng})")

    return jsonify({'success': True, 'lat': lat, 'lng': lng, 'system': to_sys.value})

@coords_bp.route('/convert_batch', methods=['POST'])
def convert_batch():
    """
    批量坐标转换，支持两种输入:
    - {"points": [[lat, lng], ...], "from": ..., "to": ...}
    - {"lats": [...], "lngs": [...], "from": ..., "to": ...}
    输出顺序与输入一致。
    """
    data = _json_body()
    from_sys, to_sys = _systems(data)
    options = _inverse_options() if _needs_inverse(from_sys, to_sys) else {}
    max_workers = current_app.config.get('BATCH_MAX_WORKERS') or None
    max_batch_size = current_app.config['MAX_BATCH_SIZE']

    points = data.get('points')
    lats, lngs = data.get('lats'), data.get('lngs')
    if points is not None and (lats is not None or lngs is not None):
        raise ValidationError('points 与 lats/lngs 只能二选一')
    if points is None:
        if not isinstance(lats, list) or not isinstance(lngs, list):
            raise ValidationError('缺少 points 或 lats/lngs')
        if len(lats) != len(lngs):
            raise ValidationError(f'lats 与 lngs 长度不一致 ({len(lats)} != {len(lngs)})')
        points = list(zip(lats, lngs))
    if not isinstance(points, list):
        raise ValidationError('points 必须是数组')
    if len(points) > max_batch_size:
        raise ValidationError(f'单次最多转换 {max_batch_size} 个点，实际为 {len(points)}')

    with log_context(f'convert_batch n={len(points)}'):
        converted = conversion.convert_batch(points, from_sys, to_sys, max_workers=max_workers, **options)
        current_app.logger.info(f"批量转换完成: {from_sys.value} -> {to_sys.value}, 共 {len(converted)} 个点")

    return jsonify({
        'success': True,
        'points': [[lat, lng] for lat, lng in converted],
        'system': to_sys.value,
    })
