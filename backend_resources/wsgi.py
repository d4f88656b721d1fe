"""Application instance for gunicorn (``backend_resources.wsgi:app``)."""
from backend_resources.flask_app import create_app

app = create_app()


if __name__ == "__main__":
    app.run(host="0.0.0.0", port=5000, debug=True)
