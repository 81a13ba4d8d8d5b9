import time

from flipcard import socketio
from flipcard.services.errors import ClientNetworkError
from . import registry, relay_client
from .engine import GameState


def emit_state_update(code: str) -> None:
    socketio.emit('state_update', {'game_code': code}, to=f"game:{code}", namespace='/ws')


def emit_session_ended(code: str) -> None:
    socketio.emit('session_ended', {'game_code': code}, to=f"game:{code}", namespace='/ws')


def schedule_unflip(app, code: str, generation: int) -> None:
    """Turn a mismatched pair back over after MISMATCH_DELAY_SEC."""
    delay = float(app.config.get('MISMATCH_DELAY_SEC', 1.0))
    _schedule(app, 'unflip', code, generation, delay, _fire_unflip)


def schedule_reveal(app, code: str, generation: int) -> None:
    """Report the finished time and reveal the summary after WIN_REVEAL_DELAY_SEC."""
    delay = float(app.config.get('WIN_REVEAL_DELAY_SEC', 0.5))
    _schedule(app, 'reveal', code, generation, delay, _fire_reveal)


def _schedule(app, action: str, code: str, generation: int, delay: float, fire) -> None:
    """Run ``fire`` once ``delay`` seconds from now.

    - Runs inline in TESTING mode unless ENABLE_SCHEDULER_IN_TESTS is set,
      otherwise as a Socket.IO background task
    - The task carries the session generation it was scheduled for; if the
      session was reset or disposed meanwhile the task aborts
    """
    app.logger.info(f"[timer-set] game={code} action={action} generation={generation} delay={delay}s")

    def _worker(expected_code: str, expected_generation: int):
        if delay > 0:
            if app.config.get('TESTING'):
                time.sleep(delay)
            else:
                socketio.sleep(delay)
        with app.app_context():
            app.logger.info(f"[timer-fire] game={expected_code} action={action} generation={expected_generation}")
            fire(app, expected_code, expected_generation)

    if app.config.get('TESTING') and not app.config.get('ENABLE_SCHEDULER_IN_TESTS'):
        _worker(code, generation)
    else:
        socketio.start_background_task(_worker, code, generation)


def _fire_unflip(app, code: str, generation: int) -> None:
    entry = registry.get_session(code)
    if not entry:
        app.logger.info(f"[timer-abort] game={code} session gone")
        return
    with entry.lock:
        applied = entry.session.unflip_mismatch(generation)
        entry.touch()
    if not applied:
        app.logger.info(f"[timer-abort] game={code} generation={generation} is stale")
        return
    emit_state_update(code)


def _fire_reveal(app, code: str, generation: int) -> None:
    entry = registry.get_session(code)
    if not entry:
        app.logger.info(f"[timer-abort] game={code} session gone")
        return
    with entry.lock:
        session = entry.session
        if session.generation != generation or session.state != GameState.COMPLETE:
            app.logger.info(f"[timer-abort] game={code} generation={generation} is stale")
            return
        time_string = session.elapsed_display()

    # The network round-trip happens outside the session lock
    summary = {'time': time_string, 'percentile': None, 'message': None, 'error': None}
    try:
        reply = relay_client.send_time(
            app.config['RELAY_URL'], time_string,
            timeout=app.config.get('RELAY_CLIENT_TIMEOUT_SEC'),
        )
    except ClientNetworkError as exc:
        app.logger.warning(f"[reveal] game={code} could not send time: {exc}")
        summary['error'] = f'An error occurred: {exc}'
    else:
        if reply.get('result') == 'Success':
            summary['percentile'] = reply.get('percentile')
            summary['message'] = reply.get('message')
        else:
            summary['error'] = f"An error occurred: {reply.get('message', 'unknown error')}"

    with entry.lock:
        applied = entry.session.reveal_summary(generation, summary)
        entry.touch()
    if not applied:
        app.logger.info(f"[timer-abort] game={code} generation={generation} reset during reveal")
        return
    app.logger.info(f"[reveal] game={code} time={time_string} percentile={summary['percentile']}")
    socketio.emit('game_complete', {'game_code': code, 'summary': summary}, to=f"game:{code}", namespace='/ws')
    emit_state_update(code)
