"""
Flask route handlers: the four pages and the actions posted from them.
"""

import sys
import traceback
from datetime import datetime

from flask import request, jsonify, redirect

from medvend.config import (
    DOCTOR_PAGE,
    HOME_PAGE,
    LOGIN_PAGE,
    SESSION_COOKIE_NAME,
    TOKEN_EXPIRY_HOURS,
)
from medvend.doctor_view import search_patient
from medvend.errors import PortalError
from medvend.gate import SessionGate, page_from_path
from medvend.models import Role
from medvend.prescriptions import PrescriptionForm, save_prescription
from medvend.presentation import PageView
from medvend.rbac import resolve_role
from medvend.session import AuthSession, handle_login, handle_logout
from medvend.api.auth import (
    sessions,
    cleanup_expired_sessions,
    extract_token,
    generate_token,
    lookup_session,
    token_required,
)


def _respond(view: PageView, redirect_code: int = 302):
    """Turn a page view into a full redirect or its JSON state."""
    if view.redirect_to:
        return redirect("/" + view.redirect_to, code=redirect_code)
    response = jsonify(view.to_dict())
    response.status_code = view.status_code
    return response


def register_routes(app, client):
    """Register all routes on the Flask *app*."""

    def current_auth_session() -> AuthSession:
        session_data = lookup_session(extract_token())
        if session_data is None:
            return AuthSession(client.auth)
        return session_data["auth"]

    def require_doctor():
        """Return an error response unless the session belongs to a doctor."""
        identity = request.session_data["auth"].current_user
        if identity is None:
            return jsonify({"error": "Not signed in"}), 401
        try:
            role = resolve_role(client, identity)
        except PortalError as e:
            return jsonify({"error": e.message}), e.status_code
        if role is not Role.DOCTOR:
            return jsonify({"error": "Only doctors may use this action"}), 403
        return None

    # ── Health ───────────────────────────────────────────────────────

    @app.route("/health", methods=["GET"])
    def health():
        checks = {"store": client.store.ping()}
        all_healthy = all(checks.values())
        return jsonify({
            "status": "healthy" if all_healthy else "unhealthy",
            "checks": checks,
            "active_sessions": len(sessions),
        }), 200 if all_healthy else 503

    # ── Pages ────────────────────────────────────────────────────────

    @app.route("/", methods=["GET"])
    @app.route("/<page>", methods=["GET"])
    def show_page(page=None):
        page = page_from_path(request.path)
        gate = SessionGate(client, page)
        unsubscribe = current_auth_session().subscribe(gate)
        unsubscribe()

        if page == HOME_PAGE and not gate.view.redirect_to:
            gate.view.set_text("service", "MedVend Portal")
        return _respond(gate.view)

    # ── Auth ─────────────────────────────────────────────────────────

    @app.route("/api/auth/login", methods=["POST"])
    def login():
        if not request.is_json:
            return jsonify({"error": "Content-Type must be application/json"}), 400

        data = request.get_json(silent=True) or {}
        auth_session = AuthSession(client.auth)
        gate = SessionGate(client, LOGIN_PAGE)
        unsubscribe = auth_session.subscribe(gate)

        try:
            identity = handle_login(auth_session, data.get("email"), data.get("password"), gate.view)
        except Exception as e:
            print(f"[ERROR] Login error: {e}", file=sys.stderr)
            traceback.print_exc()
            return jsonify({"error": "Internal server error during login"}), 500
        finally:
            unsubscribe()

        if identity is None:
            return _respond(gate.view)

        previous = extract_token()
        if previous and sessions.pop(previous, None) is not None:
            print(f"[auth] Replaced existing session for {identity.email}")

        cleanup_expired_sessions()
        token = generate_token(identity)
        sessions[token] = {
            "auth": auth_session,
            "form": PrescriptionForm(),
            "created_at": datetime.utcnow(),
            "last_activity": datetime.utcnow(),
        }

        response = _respond(gate.view, redirect_code=303)
        response.set_cookie(
            SESSION_COOKIE_NAME,
            token,
            max_age=TOKEN_EXPIRY_HOURS * 3600,
            httponly=True,
            samesite="Lax",
        )
        return response

    @app.route("/api/auth/logout", methods=["POST"])
    @token_required
    def logout():
        view = PageView(page_from_path(request.referrer or "/"))
        handle_logout(request.session_data["auth"], view)
        if not view.redirect_to:
            return _respond(view)

        sessions.pop(request.token, None)
        response = _respond(view, redirect_code=303)
        response.delete_cookie(SESSION_COOKIE_NAME)
        return response

    # ── Doctor actions ───────────────────────────────────────────────

    @app.route("/api/patients/search", methods=["POST"])
    @token_required
    def patients_search():
        denied = require_doctor()
        if denied:
            return denied

        data = request.get_json(silent=True) or {}
        view = PageView(DOCTOR_PAGE)
        search_patient(client, data.get("email", ""), request.session_data["form"], view)
        return _respond(view)

    @app.route("/api/prescriptions", methods=["POST"])
    @token_required
    def prescriptions_save():
        denied = require_doctor()
        if denied:
            return denied

        data = request.get_json(silent=True) or {}
        form = request.session_data["form"]
        form.fill(data)

        view = PageView(DOCTOR_PAGE)
        try:
            save_prescription(client, request.session_data["auth"], form, view)
        except Exception as e:
            print(f"[ERROR] Prescription save error: {e}", file=sys.stderr)
            traceback.print_exc()
            return jsonify({"error": "Internal server error while saving"}), 500
        return _respond(view)

    # ── Error handlers ───────────────────────────────────────────────

    @app.errorhandler(404)
    def not_found(e):
        return jsonify({"error": "Endpoint not found", "message": str(e)}), 404

    @app.errorhandler(405)
    def method_not_allowed(e):
        return jsonify({"error": "Method not allowed", "message": str(e)}), 405

    @app.errorhandler(500)
    def internal_error(e):
        return jsonify({"error": "Internal server error", "message": str(e)}), 500
