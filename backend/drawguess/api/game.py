from flask import Blueprint, current_app, jsonify

from drawguess.services.games.scoring import leaderboard_payload

game = Blueprint('game', __name__)


def _game_session():
    return current_app.extensions['game_session']


@game.route('/state', methods=['GET'])
def get_game_state():
    """
    Returns the full state of the running game, including phase durations
    so clients can show countdowns.
    """
    return jsonify(_game_session().snapshot())


@game.route('/leaderboard', methods=['GET'])
def get_leaderboard():
    ranked = _game_session().leaderboard()
    return jsonify({
        'leaderboard': leaderboard_payload(ranked),
        'leader': ranked[0][0] if ranked and ranked[0][1] > 0 else None,
    })
