import os

from .service import create_functions_app


def main():
    app = create_functions_app()
    port = int(os.getenv("EACHR_FUNCTIONS_PORT", "5052"))
    host = os.getenv("EACHR_FUNCTIONS_HOST", "127.0.0.1")
    print(f"Each-R edge functions listening on http://{host}:{port}")
    app.run(host=host, port=port, debug=False, threaded=True)


if __name__ == "__main__":
    main()
