from flask import Blueprint, jsonify, request
from tutorial_apps.services.calculator import CalculatorError, press


calculator = Blueprint('calculator', __name__)


@calculator.route('/press', methods=['POST'])
def press_key():
    data = request.get_json(silent=True) or {}
    display = data.get('display', '')
    key = data.get('key')
    if not isinstance(display, str) or not key:
        return jsonify({'error': 'display must be text and key is required'}), 400
    try:
        new_display = press(display, str(key))
    except CalculatorError as exc:
        return jsonify({'error': str(exc)}), 400
    return jsonify({'display': new_display})
