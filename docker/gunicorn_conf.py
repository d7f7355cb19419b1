import multiprocessing
import os

# gunicorn -c docker/gunicorn_conf.py
# Each worker process owns its own item cache.
wsgi_app = "tcm_lookup.main:create_app()"
bind = f"0.0.0.0:{os.getenv('PORT','8000')}"
workers = int(os.getenv("WEB_CONCURRENCY", str(multiprocessing.cpu_count()))) or 1
worker_class = "uvicorn.workers.UvicornWorker"
# Generation is bounded at OPENAI_TIMEOUT_S; leave headroom for the store calls.
timeout = int(os.getenv("TIMEOUT", "30"))
keepalive = 5
graceful_timeout = 30
accesslog = "-"
errorlog = "-"
loglevel = os.getenv("LOG_LEVEL", "info").lower()
