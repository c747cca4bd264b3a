"""Production server entry points (WSGI module, gunicorn runner)."""
