import json

import requests

from flipcard.api import relay as relay_module
from flipcard.services.scoring import handle_request


class Recorder:
    """Stands in for requests.post / requests.get and remembers the calls."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    def __call__(self, url, **kwargs):
        self.calls.append((url, kwargs))
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


def test_preflight_returns_cors_headers(client):
    res = client.options('/relay/')
    assert res.status_code == 204
    assert res.data == b''
    assert res.headers['Access-Control-Allow-Origin'] == '*'
    assert 'POST' in res.headers['Access-Control-Allow-Methods']
    assert res.headers['Access-Control-Allow-Headers'] == 'Content-Type'


def test_other_methods_are_rejected(client):
    for method in ('get', 'put', 'delete', 'patch'):
        res = getattr(client, method)('/relay/')
        assert res.status_code == 400
        assert res.data == b'Expected POST'
        assert res.headers['Access-Control-Allow-Origin'] == '*'


def test_post_is_forwarded_unchanged(client, monkeypatch, fake_response):
    reply = {'result': 'Success', 'percentile': 50.0, 'message': 'ok'}
    post = Recorder(fake_response(200, reply))
    monkeypatch.setattr(relay_module.requests, 'post', post)

    body = {'type': 'saveTime', 'time': '01:02'}
    res = client.post('/relay/', json=body)
    assert res.status_code == 200
    assert res.get_json() == reply
    assert res.headers['Access-Control-Allow-Origin'] == '*'

    url, kwargs = post.calls[0]
    assert url == 'http://scoring.test/exec'
    assert json.loads(kwargs['data']) == body
    assert kwargs['allow_redirects'] is False


def test_redirect_is_followed_once_with_get(client, monkeypatch, fake_response):
    post = Recorder(fake_response(302, headers={'Location': 'http://scoring.test/echo?id=1'}))
    get = Recorder(fake_response(200, {'result': 'Success'}))
    monkeypatch.setattr(relay_module.requests, 'post', post)
    monkeypatch.setattr(relay_module.requests, 'get', get)

    res = client.post('/relay/', json={'type': 'saveDetails', 'Name': 'A', 'Email': 'a@b.co'})
    assert res.status_code == 200
    assert res.get_json() == {'result': 'Success'}
    assert [c[0] for c in get.calls] == ['http://scoring.test/echo?id=1']


def test_second_redirect_is_not_followed(client, monkeypatch, fake_response):
    post = Recorder(fake_response(302, headers={'Location': 'http://scoring.test/a'}))
    get = Recorder(fake_response(302, headers={'Location': 'http://scoring.test/b'}))
    monkeypatch.setattr(relay_module.requests, 'post', post)
    monkeypatch.setattr(relay_module.requests, 'get', get)

    res = client.post('/relay/', json={'type': 'saveTime', 'time': '00:10'})
    assert res.status_code == 500
    assert len(get.calls) == 1


def test_backend_failure_status_becomes_500(client, monkeypatch, fake_response):
    monkeypatch.setattr(relay_module.requests, 'post', Recorder(fake_response(503, {'error': 'down'})))
    res = client.post('/relay/', json={'type': 'saveTime', 'time': '00:10'})
    assert res.status_code == 500
    assert b'status: 503' in res.data


def test_network_error_becomes_500(client, monkeypatch):
    monkeypatch.setattr(relay_module.requests, 'post', Recorder(requests.ConnectionError('connection refused')))
    res = client.post('/relay/', json={'type': 'saveTime', 'time': '00:10'})
    assert res.status_code == 500
    assert b'connection refused' in res.data


def test_malformed_backend_json_becomes_500(client, monkeypatch, fake_response):
    monkeypatch.setattr(relay_module.requests, 'post', Recorder(fake_response(200, None)))
    res = client.post('/relay/', json={'type': 'saveTime', 'time': '00:10'})
    assert res.status_code == 500


def test_malformed_request_body_is_not_forwarded(client, monkeypatch, fake_response):
    post = Recorder(fake_response(200, {}))
    monkeypatch.setattr(relay_module.requests, 'post', post)
    res = client.post('/relay/', data='{oops', content_type='application/json')
    assert res.status_code == 500
    assert post.calls == []


def test_relay_to_scoring_round_trip(client, monkeypatch, fake_response):
    def scoring_backend(url, data=None, **kwargs):
        return fake_response(200, handle_request(json.loads(data)))

    monkeypatch.setattr(relay_module.requests, 'post', scoring_backend)
    first = client.post('/relay/', json={'type': 'saveTime', 'time': '01:00'}).get_json()
    second = client.post('/relay/', json={'type': 'saveTime', 'time': '02:00'}).get_json()
    assert first['percentile'] == 100.0
    assert second['percentile'] == 50.0
    assert 'top half' in second['message']
