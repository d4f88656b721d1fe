"""User management endpoints.

    POST /api/users         create a Keycloak user (moderator)
    GET  /api/users/hello   caller's own username
    GET  /api/users/<id>    profile with realm roles and groups (moderator)

Each handler starts with an explicit ``guard(role)`` call; service results
that carry an error are raised and rendered by ``api.errors``.
"""
from __future__ import annotations
import logging

from flask import Blueprint, Response, abort, current_app, jsonify, request

from backend_resources.api.security import guard
from backend_resources.core.user_management import UserAggregationService

bp = Blueprint("users", __name__)

logger = logging.getLogger(__name__)


def _service() -> UserAggregationService:
    return current_app.config["USER_SERVICE"]


def _config():
    return current_app.config["APP_CONFIG"]


@bp.route("", methods=["POST"])
def create_user():
    guard(_config().moderator_role)

    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        abort(400, description="Request body must be a JSON object")

    result = _service().create_user(payload)
    if not result.ok:
        raise result.error
    return Response(status=200)


@bp.route("/hello", methods=["GET"])
def hello():
    caller = guard(_config().hello_required_role)
    username = _service().get_current_user_name(caller)
    return (username, 200, {"Content-Type": "text/plain; charset=utf-8"})


@bp.route("/<user_id>", methods=["GET"])
def get_user_by_id(user_id: str):
    guard(_config().moderator_role)

    result = _service().get_user_by_id(user_id)
    if not result.ok:
        raise result.error
    return jsonify(result.value.to_dict())
