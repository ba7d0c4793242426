"""
Storn Backend API
Flask-based backend for e-commerce analytics

Exposes ``app`` for WSGI servers, e.g. ``gunicorn app:app``.
"""

from storn import create_app

# Create the Flask application using the factory pattern
app = create_app()


if __name__ == '__main__':
    app.run(debug=True, host='0.0.0.0', port=5000)
