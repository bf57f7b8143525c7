from flask import Blueprint, request, jsonify, current_app
import logging

from cutquote.utils import costing, file_parser
from cutquote.utils.errors import InvalidFormat, UnsupportedFormat

main_bp = Blueprint('main', __name__)


def decode_upload(raw):
    """Decode uploaded bytes as UTF-8, falling back to Latin-1 (older DXF exports)."""
    try:
        return raw.decode('utf-8-sig')
    except UnicodeDecodeError:
        logging.info("Upload is not UTF-8, decoding as latin-1")
        return raw.decode('latin-1')


def _measure_upload():
    """Measure the uploaded 'file' field; returns (result, None) or (None, error response)."""
    if 'file' not in request.files:
        return None, (jsonify({"error": "No file part"}), 400)
    file = request.files['file']
    if not file.filename:
        return None, (jsonify({"error": "No selected file"}), 400)

    content = decode_upload(file.read())
    try:
        return file_parser.measure(file.filename, content), None
    except UnsupportedFormat as e:
        return None, (jsonify({"error": str(e)}), 415)
    except InvalidFormat as e:
        return None, (jsonify({"error": str(e)}), 422)


@main_bp.route('/health', methods=['GET'])
def health():
    return jsonify({"status": "ok"})


@main_bp.route('/rates', methods=['GET'])
def rates():
    return jsonify({"rates": costing.load_rates(current_app.config.get('RATES_FILE'))})


@main_bp.route('/measure', methods=['POST'])
def measure():
    result, error = _measure_upload()
    if error:
        return error
    return jsonify(result.to_dict()), 200


@main_bp.route('/quote', methods=['POST'])
def quote():
    material = request.form.get('material', '')
    try:
        quantity = int(request.form.get('quantity', 1))
    except ValueError:
        return jsonify({"error": f"Invalid quantity: {request.form.get('quantity')}"}), 400
    rate_table = costing.load_rates(current_app.config.get('RATES_FILE'))
    try:
        rate_cut, rate_material = costing.get_rates(material, rate_table)
    except ValueError as e:
        return jsonify({"error": str(e)}), 400

    # No price is built unless the measurement itself succeeded.
    result, error = _measure_upload()
    if error:
        return error
    try:
        price = costing.calculate_price(result, rate_cut, rate_material, quantity)
    except ValueError as e:
        return jsonify({"error": str(e)}), 400
    logging.info(f"Quote for {request.files['file'].filename}: material={material}, quantity={quantity}, total={price['total_price']:.2f}")
    return jsonify({
        "measurement": result.to_dict(),
        "material": material.strip().lower(),
        "price": price,
    }), 200
