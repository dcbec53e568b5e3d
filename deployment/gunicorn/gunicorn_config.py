wsgi_app = "core.wsgi:application"
bind = "unix:/var/www/agriconnect/agriconnect-backend/gunicorn.sock"
workers = 4
worker_class = "sync"
worker_tmp_dir = "/dev/shm"
max_requests = 1000
max_requests_jitter = 100
timeout = 60
keepalive = 5

# Logging
accesslog = "/var/log/agriconnect-backend/access.log"
errorlog = "/var/log/agriconnect-backend/error.log"
loglevel = "info"
access_log_format = '%(h)s %(l)s %(u)s %(t)s "%(r)s" %(s)s %(b)s "%(f)s" "%(a)s" %(D)s'

# Process naming
proc_name = "agriconnect-backend"

# Server mechanics
daemon = False
pidfile = "/var/run/agriconnect-backend/gunicorn.pid"
user = "deploy"
group = "deploy"
umask = 0o007

# Server hooks
def on_starting(server):
    server.log.info("Starting AgriConnect API")

def when_ready(server):
    server.log.info("AgriConnect API ready, spawning workers")

def worker_abort(worker):
    """Usually a request that ran past ``timeout``; often a slow image upload."""
    worker.log.warning(f"Worker {worker.pid} aborted")
