"""WSGI entrypoint.

Usage:
  gunicorn -w 1 --threads 8 -b 0.0.0.0:3000 wsgi:app

With the file backend, run a single worker process: the JSON document is only
locked within one process.
"""

from inventory import create_app

app = create_app()
