"""Gunicorn settings: ``gunicorn -c gunicorn.conf.py config.wsgi``."""

import environ

env = environ.Env(
    PORT=(int, 3001),
    WEB_CONCURRENCY=(int, 2),
)

bind = f"0.0.0.0:{env('PORT')}"
workers = env("WEB_CONCURRENCY")
accesslog = "-"
errorlog = "-"
