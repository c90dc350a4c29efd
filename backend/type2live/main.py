import time

from flask import Blueprint, jsonify
from type2live.models import Term

main = Blueprint('main', __name__)

@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the TYPE 2 LIVE game server!'})

@main.route('/health')
def health():
    return jsonify({
        'status': 'ok',
        'terms': Term.query.count(),
        'timestamp': time.time(),
    })
