from flask import Blueprint, request, jsonify
from .models import db, User, OrganizationMember
from .api.payload import json_object, optional_text
from flask_login import login_user, logout_user, login_required, current_user

main = Blueprint('main', __name__)

@main.route('/')
def index():
    return jsonify({'message': 'VolleyScore API', 'status': 'ok'})

@main.route('/login', methods=['POST', 'OPTIONS'])
def login():
    if request.method == 'OPTIONS':
        return jsonify({'status': 'ok'}), 200
    data = json_object()
    user = User.query.filter_by(username=optional_text(data, 'username')).first()
    password = data.get('password') or ''
    if user and isinstance(password, str) and user.check_password(password):
        login_user(user)
        return jsonify({"success": True, "user": user.to_dict()})
    return jsonify({"success": False, "message": "Invalid credentials"}), 401

@main.route('/register', methods=['POST', 'OPTIONS'])
def register():
    if request.method == 'OPTIONS':
        return jsonify({'status': 'ok'}), 200
    data = json_object()
    username = optional_text(data, 'username')
    password = data.get('password') or ''
    if not username or not isinstance(password, str) or not password:
        return jsonify({"success": False, "message": "Missing username or password"}), 400
    if User.query.filter_by(username=username).first():
        return jsonify({"success": False, "message": "Username already exists"}), 400

    new_user = User(username=username)
    new_user.set_password(password)
    db.session.add(new_user)
    db.session.commit()
    login_user(new_user)
    return jsonify({"success": True, "user": new_user.to_dict()}), 201

@main.route('/check_login', methods=['GET', 'OPTIONS'])
def check_login():
    if request.method == 'OPTIONS':
        return jsonify({'status': 'ok'}), 200

    @login_required
    def protected_check():
        return jsonify({"success": True, "user": current_user.to_dict()})

    return protected_check()

@main.route('/logout', methods=['POST', 'OPTIONS'])
@login_required
def logout():
    logout_user()
    return jsonify({"success": True})

@main.route('/me/organization')
@login_required
def my_organization():
    # Users belong to at most one organization
    membership = OrganizationMember.query.filter_by(user_id=current_user.id).first()
    if not membership:
        return jsonify(None)
    return jsonify({
        'organization': membership.organization.to_dict(),
        'membership': membership.to_dict(),
    })
