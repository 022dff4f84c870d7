# Gunicorn configuration for the CP Journey sync server
import os

wsgi_app = "app:create_app('production')"
bind = os.environ.get("GUNICORN_BIND", "127.0.0.1:3001")
# The auto-sync scheduler and the JSON store live in-process: keep one worker
workers = 1
threads = int(os.environ.get("GUNICORN_THREADS", "4"))
timeout = 120
keepalive = 5
errorlog = "/var/log/cp-journey/gunicorn-error.log"
accesslog = "/var/log/cp-journey/gunicorn-access.log"
loglevel = "info"
