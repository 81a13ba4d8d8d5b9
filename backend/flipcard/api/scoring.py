from flask import Blueprint, jsonify, request

from flipcard.services.scoring import handle_request

scoring = Blueprint('scoring', __name__)


@scoring.route('/', methods=['POST'])
def do_post():
    # Always 200: failures are reported in the body as {result: "Error"}
    payload = request.get_json(force=True, silent=True)
    return jsonify(handle_request(payload))
