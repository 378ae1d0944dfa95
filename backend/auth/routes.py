# backend/auth/routes.py

from flask import Blueprint, request, jsonify
from flask_jwt_extended import jwt_required, get_jwt_identity
from pydantic import ValidationError

from auth.schemas import RegisterSchema, LoginSchema
from auth.services import register_user, login_user, find_user
from errors import NotFoundError, validation_error_response

auth_bp = Blueprint("auth", __name__, url_prefix="/auth")


def _body() -> dict:
    body = request.get_json(silent=True)
    return body if isinstance(body, dict) else {}


@auth_bp.route("/register", methods=["POST"])
def register():

    try:
        data = RegisterSchema(**_body())
    except ValidationError as e:
        return validation_error_response(e)

    result, error = register_user(data)

    if error:
        return jsonify({"error": "invalid_request", "message": error}), 400

    return jsonify(result), 201


@auth_bp.route("/login", methods=["POST"])
def login():

    try:
        data = LoginSchema(**_body())
    except ValidationError as e:
        return validation_error_response(e)

    result, error = login_user(data)

    if error:
        return jsonify({"error": "unauthorized", "message": error}), 401

    return jsonify(result), 200


@auth_bp.route("/me", methods=["GET"])
@jwt_required()
def me():

    user = find_user(get_jwt_identity())
    if user is None:
        raise NotFoundError("User not found")

    return jsonify(user.to_dict()), 200
