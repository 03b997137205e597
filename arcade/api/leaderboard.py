from flask import Blueprint, current_app, jsonify, request

leaderboard = Blueprint('leaderboard', __name__)

MAX_LIMIT = 100


def _store():
    return current_app.extensions['arcade'].leaderboard


@leaderboard.route('', methods=['GET'])
def get_leaderboard():
    """
    Returns the ranked leaderboard, top 10 unless ?limit= says otherwise.
    """
    limit = request.args.get('limit', type=int)
    if limit is not None and not 1 <= limit <= MAX_LIMIT:
        return jsonify({'error': f'limit must be between 1 and {MAX_LIMIT}'}), 400
    return jsonify(_store().top(limit)), 200


@leaderboard.route('/<string:username>', methods=['GET'])
def get_player_stats(username):
    """
    Returns total and per-game win counts for one player.
    """
    stats = _store().stats(username)
    if not stats:
        return jsonify({'error': 'Player not found'}), 404
    return jsonify(stats), 200
