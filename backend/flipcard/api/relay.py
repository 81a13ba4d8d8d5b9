"""Stateless relay: forwards one JSON POST to the scoring backend.

Exists so browsers can reach a backend that does not send CORS headers.
The payload is never inspected.
"""
import json

import requests
from flask import Blueprint, Response, current_app, request

from flipcard.services.errors import BackendError

relay = Blueprint('relay', __name__)

CORS_HEADERS = {
    'Access-Control-Allow-Origin': '*',
    'Access-Control-Allow-Methods': 'GET,HEAD,POST,OPTIONS',
    'Access-Control-Max-Age': '86400',
    'Access-Control-Allow-Headers': 'Content-Type',
}


def forward_json(url: str, raw: bytes):
    """POST ``raw`` (which must be JSON) to ``url``; return (status, data).

    A redirect reply is followed exactly once with a GET.
    """
    body = json.dumps(json.loads(raw)).encode('utf-8')
    response = requests.post(
        url,
        data=body,
        headers={'Content-Type': 'application/json'},
        allow_redirects=False,
    )
    if response.is_redirect:
        location = response.headers.get('Location')
        current_app.logger.info(f"[relay] following redirect status={response.status_code}")
        response = requests.get(location, allow_redirects=False)
    if not 200 <= response.status_code < 300:
        raise BackendError(f'Backend responded with status: {response.status_code}')
    return response.status_code, response.json()


@relay.route('/', methods=['GET', 'HEAD', 'POST', 'PUT', 'PATCH', 'DELETE', 'OPTIONS'])
def forward():
    if request.method == 'OPTIONS':
        return Response(status=204, headers=CORS_HEADERS)
    if request.method != 'POST':
        return Response('Expected POST', status=400, headers=CORS_HEADERS, mimetype='text/plain')
    try:
        status, data = forward_json(current_app.config['RELAY_BACKEND_URL'], request.get_data())
    except (BackendError, requests.RequestException, ValueError) as exc:
        current_app.logger.error(f"[relay] error: {exc}")
        return Response(str(exc), status=500, headers=CORS_HEADERS, mimetype='text/plain')
    return Response(json.dumps(data), status=status, headers=CORS_HEADERS, mimetype='application/json')
