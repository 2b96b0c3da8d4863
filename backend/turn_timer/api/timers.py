from flask import Blueprint, jsonify, request, current_app
from turn_timer import get_store, get_controller, broadcast_state


timers = Blueprint('timers', __name__)


def _respond(snapshot, status=200):
    broadcast_state(snapshot)
    return jsonify(snapshot.to_dict()), status


@timers.route('/state', methods=['GET'])
def get_state():
    return jsonify(get_store(current_app).snapshot().to_dict())


@timers.route('/players', methods=['POST'])
def add_player():
    snapshot = get_store(current_app).add_player()
    return _respond(snapshot, 201)


@timers.route('/players/<string:player_id>', methods=['DELETE'])
def remove_player(player_id):
    # Confirmation happens client-side before this is called
    snapshot = get_store(current_app).remove_player(player_id)
    return _respond(snapshot)


@timers.route('/players/<string:player_id>', methods=['PATCH'])
def update_player(player_id):
    data = request.get_json(silent=True) or {}
    if 'name' not in data and 'elapsed_seconds' not in data:
        return jsonify({'error': 'name or elapsed_seconds is required'}), 400

    name = data.get('name')
    if 'name' in data and not isinstance(name, str):
        return jsonify({'error': 'name must be a string'}), 400
    seconds = data.get('elapsed_seconds')
    if 'elapsed_seconds' in data and (isinstance(seconds, bool) or not isinstance(seconds, int) or seconds < 0):
        return jsonify({'error': 'elapsed_seconds must be a non-negative integer'}), 400

    store = get_store(current_app)
    with store.lock:
        if 'name' in data:
            snapshot = store.rename_player(player_id, name)
        if 'elapsed_seconds' in data:
            snapshot = store.set_elapsed(player_id, seconds)
    return _respond(snapshot)


@timers.route('/players/<string:player_id>/toggle', methods=['POST'])
def toggle_player(player_id):
    snapshot = get_controller(current_app).toggle_start_stop(player_id)
    return _respond(snapshot)


@timers.route('/reset', methods=['POST'])
def reset_all():
    # Confirmation happens client-side before this is called
    get_controller(current_app).stop()
    snapshot = get_store(current_app).reset_all()
    current_app.logger.info(f"[reset] {len(snapshot.players)} players restored")
    return _respond(snapshot)
