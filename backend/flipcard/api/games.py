from flask import Blueprint, jsonify, request, current_app

from flipcard.services.errors import ClientNetworkError
from flipcard.services.games import registry, relay_client
from flipcard.services.games.engine import FlipOutcome
from flipcard.services.games.scheduler import emit_session_ended, emit_state_update, schedule_reveal, schedule_unflip


games = Blueprint('games', __name__)


def _payload(entry: registry.SessionEntry) -> dict:
    with entry.lock:
        payload = entry.session.to_dict()
    payload['game_code'] = entry.code
    return payload


def _get_entry(game_code):
    return registry.get_session(game_code, ttl=current_app.config.get('SESSION_TTL_SEC'))


def _json_object():
    """The request body as a dict, {} when absent, None when it is not an object."""
    data = request.get_json(silent=True)
    if data is None:
        return {}
    return data if isinstance(data, dict) else None


def _game_not_found():
    return jsonify({'error': 'Game not found'}), 404


def _not_an_object():
    return jsonify({'error': 'Request body must be a JSON object'}), 400


@games.route('/create', methods=['POST'])
def create_game():
    data = _json_object()
    if data is None:
        return _not_an_object()
    pairs = data.get('pairs') or current_app.config.get('CARD_PAIRS')
    try:
        entry = registry.create_session(
            ttl=current_app.config.get('SESSION_TTL_SEC'),
            **({'pairs': pairs} if pairs else {}),
        )
    except ValueError as exc:
        return jsonify({'error': str(exc)}), 400
    current_app.logger.info(f"[create] game={entry.code} cards={entry.session.total_cards}")
    return jsonify({
        'message': 'New game created!',
        'game_code': entry.code,
        'total_cards': entry.session.total_cards,
        'columns': entry.session.columns,
    }), 201


@games.route('/<string:game_code>/state', methods=['GET'])
def get_game_state(game_code):
    entry = _get_entry(game_code)
    if not entry:
        return _game_not_found()
    return jsonify(_payload(entry))


@games.route('/<string:game_code>/start', methods=['POST'])
def start_game(game_code):
    entry = _get_entry(game_code)
    if not entry:
        return _game_not_found()
    with entry.lock:
        started = entry.session.start()
        entry.touch()
    if started:
        current_app.logger.info(f"[start] game={entry.code}")
        emit_state_update(entry.code)
    # Idempotent: starting a running game just returns its state
    return jsonify(_payload(entry))


@games.route('/<string:game_code>/flip', methods=['POST'])
def flip_card(game_code):
    data = _json_object()
    if data is None:
        return _not_an_object()
    index = data.get('index')
    if not isinstance(index, int) or isinstance(index, bool):
        return jsonify({'error': 'Card index is required'}), 400
    entry = _get_entry(game_code)
    if not entry:
        return _game_not_found()

    with entry.lock:
        outcome = entry.session.flip(index)
        generation = entry.session.generation
        entry.touch()
    if outcome != FlipOutcome.IGNORED:
        current_app.logger.info(f"[flip] game={entry.code} index={index} outcome={outcome.value}")
        emit_state_update(entry.code)

    # Scheduled after the lock is released; in tests these run inline
    app = current_app._get_current_object()
    if outcome == FlipOutcome.MISMATCH:
        schedule_unflip(app, entry.code, generation)
    elif outcome == FlipOutcome.COMPLETE:
        schedule_reveal(app, entry.code, generation)

    payload = _payload(entry)
    payload['outcome'] = outcome.value
    return jsonify(payload)


@games.route('/<string:game_code>/reset', methods=['POST'])
def reset_game(game_code):
    entry = _get_entry(game_code)
    if not entry:
        return _game_not_found()
    with entry.lock:
        entry.session.reset()
        entry.touch()
    current_app.logger.info(f"[reset] game={entry.code} generation={entry.session.generation}")
    emit_state_update(entry.code)
    return jsonify(_payload(entry))


@games.route('/<string:game_code>/details', methods=['POST'])
def submit_details(game_code):
    entry = _get_entry(game_code)
    if not entry:
        return _game_not_found()
    data = _json_object()
    if data is None:
        return _not_an_object()
    name = data.get('name') or ''
    email = data.get('email')
    if not data.get('privacy_policy'):
        return jsonify({'error': 'The privacy policy must be accepted', 'field': 'privacy_policy'}), 400
    if not relay_client.is_valid_email(email):
        return jsonify({'error': 'Invalid email address', 'field': 'email'}), 400

    entry.touch()
    try:
        reply = relay_client.send_details(
            current_app.config['RELAY_URL'], name, email,
            timeout=current_app.config.get('RELAY_CLIENT_TIMEOUT_SEC'),
        )
    except ClientNetworkError as exc:
        current_app.logger.warning(f"[details] game={entry.code} failed: {exc}")
        return jsonify({'error': f'An error occurred: {exc}'}), 502
    if reply.get('result') != 'Success':
        return jsonify({'error': 'Failed to send data. Please try again.'}), 502
    return jsonify({'success': True, 'message': reply.get('message')})


@games.route('/<string:game_code>', methods=['DELETE'])
def dispose_game(game_code):
    if not registry.dispose_session(game_code):
        return _game_not_found()
    current_app.logger.info(f"[dispose] game={game_code.upper()}")
    emit_session_ended(game_code.upper())
    return jsonify({'message': 'Game disposed'})
