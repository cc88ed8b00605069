import os

from .service import create_portal_app


def main():
    app = create_portal_app()
    port = int(os.getenv("EACHR_PORTAL_PORT", "5053"))
    host = os.getenv("EACHR_PORTAL_HOST", "127.0.0.1")
    print(f"Each-R portal listening on http://{host}:{port}")
    app.run(host=host, port=port, debug=False, threaded=True)


if __name__ == "__main__":
    main()
