"""WSGI entry point.

Gunicorn: ``gunicorn "taskboard.wsgi:app"``. Running the module directly
starts the Flask development server on ``PORT`` (default 3000).
"""

import os

from taskboard import create_app


app = create_app()


if __name__ == "__main__":
    app.run(host="0.0.0.0", port=int(os.getenv("PORT", "3000")))
