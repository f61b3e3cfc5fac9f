from flask import Blueprint, jsonify, current_app

main_bp = Blueprint('main', __name__)

@main_bp.route('/')
def index():
    """健康检查"""
    return jsonify({'success': True, 'service': 'coordconv', 'debug': current_app.config.get('DEBUG', False)})
