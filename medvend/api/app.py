"""
Flask application factory and server entry-point.
"""

import os
import sys
import traceback

from flask import Flask
from flask_cors import CORS

from medvend.config import AUTH_BACKEND, TOKEN_EXPIRY_HOURS
from medvend.client import init_client
from medvend.api.routes import register_routes


def create_app(client=None):
    """Build and return a fully configured Flask application.

    *client* is built from the environment when not given.
    """
    app = Flask(__name__)
    CORS(app, supports_credentials=True)

    # ── Initialise shared resources ──────────────────────────────────
    if client is None:
        try:
            print("[init] Initializing document store and auth provider...")
            client = init_client()
            print("[init] ✓ Portal ready")
        except Exception as e:
            print(f"[FATAL] Failed to initialize: {e}", file=sys.stderr)
            traceback.print_exc()
            sys.exit(1)

    # ── Register routes ──────────────────────────────────────────────
    register_routes(app, client)

    return app


def main():
    """Run the development server."""
    print("=" * 60)
    print("MedVend Portal – Web Server")
    print("=" * 60)

    app = create_app()

    host = os.getenv("API_HOST", "0.0.0.0")
    port = int(os.getenv("API_PORT", "8000"))
    debug = os.getenv("FLASK_ENV") == "development"

    print(f"\n[server] Starting Flask server on {host}:{port}")
    print(f"[server] Debug mode: {debug}")
    print(f"[server] Auth backend: {AUTH_BACKEND}")
    print(f"[server] Session expiry: {TOKEN_EXPIRY_HOURS} hours")
    print("\nPages:")
    print(f"  - GET  http://{host}:{port}/login.html")
    print(f"  - GET  http://{host}:{port}/dashboard.html")
    print(f"  - GET  http://{host}:{port}/doctor.html")
    print("\nActions:")
    print(f"  - POST http://{host}:{port}/api/auth/login")
    print(f"  - POST http://{host}:{port}/api/auth/logout")
    print(f"  - POST http://{host}:{port}/api/patients/search")
    print(f"  - POST http://{host}:{port}/api/prescriptions")
    print(f"  - GET  http://{host}:{port}/health")
    print("\n" + "=" * 60)

    app.run(host=host, port=port, debug=debug, threaded=True)


if __name__ == "__main__":
    main()
