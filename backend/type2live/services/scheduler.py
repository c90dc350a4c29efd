import time
from typing import Set, Tuple

from type2live import socketio


_scheduled_keys: Set[Tuple[str, str, int]] = set()


def _scheduler_enabled(app) -> bool:
    return not app.config.get('TESTING') or app.config.get('ENABLE_SCHEDULER_IN_TESTS')


def _run(app, worker, *args) -> None:
    if app.config.get('TESTING'):
        worker(*args)
    else:
        socketio.start_background_task(worker, *args)


def _sleep(app, delay: float, label: str) -> None:
    # heartbeat sleep loop if enabled
    try:
        hb = int(app.config.get('TIMER_HEARTBEAT_SEC', 0))
    except Exception:
        hb = 0
    if hb and hb > 0:
        slept = 0.0
        while slept < delay:
            step = min(hb, delay - slept)
            time.sleep(step)
            slept += step
            app.logger.info(f"[timer-heartbeat] {label} remaining={max(0, delay - slept):.0f}s")
    elif delay > 0:
        time.sleep(delay)


def schedule_game_end(app, room_code: str, duration_sec: int) -> None:
    """End the room's session once its time limit passes.

    - No-ops in TESTING unless ENABLE_SCHEDULER_IN_TESTS is set
    - Ensures a single timer per room
    - A session that already ended is left alone
    """
    if not _scheduler_enabled(app):
        return
    key = (room_code, 'game_end', 0)
    if key in _scheduled_keys:
        app.logger.info(f"[timer-skip] room={room_code} game end already scheduled")
        return
    _scheduled_keys.add(key)
    app.logger.info(f"[timer-set] room={room_code} kind=game_end duration={duration_sec}s")

    def _worker(code: str, delay: int):
        _sleep(app, delay, f"room={code} kind=game_end")
        _scheduled_keys.discard((code, 'game_end', 0))
        from type2live.services.rooms import app_scope, end_game
        with app_scope(app):
            ended = end_game(code, 'time_limit')
            app.logger.info(f"[timer-fire] room={code} kind=game_end ended={ended}")

    _run(app, _worker, room_code, duration_sec)


def schedule_turn_timeout(app, room_code: str, sequence_number: int) -> None:
    """Expire a turn that is still current after TURN_TIMEOUT_SEC (0 disables)."""
    try:
        timeout = int(app.config.get('TURN_TIMEOUT_SEC', 0))
    except Exception:
        timeout = 0
    if timeout <= 0 or not _scheduler_enabled(app):
        return
    key = (room_code, 'turn', sequence_number)
    if key in _scheduled_keys:
        return
    _scheduled_keys.add(key)
    app.logger.info(f"[timer-set] room={room_code} kind=turn seq={sequence_number} duration={timeout}s")

    def _worker(code: str, seq: int, delay: int):
        _sleep(app, delay, f"room={code} kind=turn seq={seq}")
        _scheduled_keys.discard((code, 'turn', seq))
        from type2live.services.rooms import app_scope, registry
        session = registry.get(code)
        if session is None:
            app.logger.info(f"[timer-abort] room={code} seq={seq} no live session")
            return
        with app_scope(app):
            turn = session.expire_turn(seq)
        if turn is None:
            app.logger.info(f"[timer-abort] room={code} seq={seq} turn already superseded")
        else:
            app.logger.info(f"[timer-fire] room={code} kind=turn seq={seq} next_seq={turn.sequence_number}")

    _run(app, _worker, room_code, sequence_number, timeout)
