from flask_socketio import emit
from flask import current_app
from turn_timer import get_store, get_controller, broadcast_state


def handle_connect():
    emit('connected', {'message': 'Connected to /ws'})
    # New clients render straight away instead of waiting for the next change
    emit('state_update', get_store(current_app).snapshot().to_dict())


def handle_get_state(data=None):
    emit('state_update', get_store(current_app).snapshot().to_dict())


def handle_toggle(data):
    player_id = (data or {}).get('player_id')
    if not player_id:
        emit('error', {'message': 'player_id is required'})
        return
    snapshot = get_controller(current_app).toggle_start_stop(player_id)
    broadcast_state(snapshot)


def handle_ping(data):
    emit('pong', data or {})


def register_socketio_handlers(testing: bool = False) -> None:
    """Register Socket.IO event handlers.

    Always register on namespace '/ws'. When testing is True, also mirror
    handlers on the default namespace '/' to accommodate the test harness.
    """
    socketio_handlers = {
        'connect': handle_connect,
        'get_state': handle_get_state,
        'toggle': handle_toggle,
        'ping': handle_ping,
    }
    from turn_timer import socketio
    for event, handler in socketio_handlers.items():
        socketio.on_event(event, handler, namespace='/ws')
        if testing:
            # Test-only mirror on default namespace
            socketio.on_event(event, handler, namespace='/')
