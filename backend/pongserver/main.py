from flask import Blueprint, current_app, jsonify

main = Blueprint('main', __name__)


@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the pong matchmaking server!'})


@main.route('/status')
def status():
    return jsonify(current_app.extensions['pong'].status())
