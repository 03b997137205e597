from flask import Blueprint, current_app, jsonify

main = Blueprint('main', __name__)

@main.route('/')
def index():
    sessions = current_app.extensions['arcade']
    return jsonify({
        'message': 'Welcome to the arcade server!',
        'games': sorted(sessions.registry.variants),
        'rooms': len(sessions.registry),
    })
