"""
Development server: `python -m api`.
Use a WSGI server (gunicorn) with `api:create_app()` in production.
"""
import os

from . import create_app

app = create_app()

if __name__ == "__main__":
    app.run(
        host=os.getenv("FLASK_RUN_HOST", "0.0.0.0"),
        port=int(os.getenv("FLASK_RUN_PORT", "8080")),
        debug=app.config.get("DEBUG", False),
    )
