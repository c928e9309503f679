from flask import Blueprint, jsonify

from volleyscore.services.scoring import operations
from .payload import json_object

scoring = Blueprint('scoring', __name__)


@scoring.route('/<int:match_id>/start', methods=['POST'])
def start_match(match_id):
    return jsonify(operations.start_match(match_id))


@scoring.route('/<int:match_id>/point', methods=['POST'])
def add_point(match_id):
    # side is checked by the engine
    data = json_object()
    return jsonify(operations.add_point(match_id, data.get('side')))


@scoring.route('/<int:match_id>/undo', methods=['POST'])
def undo_point(match_id):
    return jsonify(operations.undo_point(match_id))


@scoring.route('/<int:match_id>/end', methods=['POST'])
def end_match(match_id):
    data = json_object()
    return jsonify(operations.end_match(match_id, data.get('winner')))


@scoring.route('/<int:match_id>/score', methods=['GET'])
def get_match_score(match_id):
    view = operations.get_match_score(match_id)
    if view is None:
        return jsonify({'error': 'Match not found'}), 404
    return jsonify(view)
