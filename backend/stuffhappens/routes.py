from flask import Blueprint, request, jsonify, current_app
from flask_login import login_user, logout_user, login_required, current_user
from stuffhappens import db
from stuffhappens.models import User

main = Blueprint('main', __name__)

@main.route('/')
def index():
    return jsonify({'message': 'Stuff Happens API is running!'})

@main.route('/api/users', methods=['POST'])
def add_user():
    data = request.get_json(silent=True)
    if not data or not data.get('username') or not data.get('password'):
        return jsonify({'error': 'Missing username or password'}), 400

    if User.query.filter_by(username=data['username']).first():
        return jsonify({'error': 'Username already exists'}), 400

    user = User(username=data['username'])
    user.set_password(data['password'])
    db.session.add(user)
    db.session.commit()
    current_app.logger.info(f"[user-add] user={user.id} username={user.username}")

    return jsonify(user.to_dict()), 201

@main.route('/api/login', methods=['POST'])
def login():
    data = request.get_json(silent=True) or {}
    user = User.query.filter_by(username=data.get('username')).first()
    if user and user.check_password(data.get('password') or ''):
        login_user(user)
        current_app.logger.info(f"[login] user={user.id}")
        return jsonify(user.to_dict())
    return jsonify({'error': 'Incorrect username or password.'}), 401

@main.route('/api/logout', methods=['GET', 'POST'])
@login_required
def logout():
    logout_user()
    return jsonify({'message': 'Logged out successfully.'})

@main.route('/api/current-user')
@login_required
def get_current_user():
    return jsonify(current_user.to_dict())
