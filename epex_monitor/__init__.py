# epex_monitor/__init__.py
from flask import Flask
from config import Config
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger
from datetime import datetime
import logging
import atexit
import fcntl
import os

from epex_monitor.publication import PriceStore
from epex_monitor.sensors import register_sensors
from epex_monitor.tasks import PRICE_STORE_KEY, run_poll_cycle

logger = logging.getLogger(__name__)


def configure_logging(config):
    """Set up root logging once; later app instances reuse the same handlers"""
    if logging.getLogger().handlers:
        return
    handlers = [logging.StreamHandler()]
    if config.get('LOG_FILE'):
        handlers.append(logging.FileHandler(config['LOG_FILE']))
    logging.basicConfig(
        level=config.get('LOG_LEVEL', 'INFO'),
        format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S',
        handlers=handlers
    )


def create_app(config_class=Config):
    app = Flask(__name__)
    app.config.from_object(config_class)

    configure_logging(app.config)
    logger.info("Creating EPEX monitor application")

    store = PriceStore()
    app.extensions[PRICE_STORE_KEY] = store
    app.extensions['epex_sensors'] = register_sensors(store)

    from epex_monitor.routes import bp as main_bp
    app.register_blueprint(main_bp)
    logger.info("Main blueprint registered")

    if app.config.get('SCHEDULER_ENABLED'):
        start_scheduler(app)
    else:
        logger.info("Background scheduler disabled")

    logger.info("EPEX monitor application created successfully")
    return app


def start_scheduler(app):
    """Poll ENTSO-E in the background; only one worker process gets the job"""
    lock_file_path = os.path.join(app.instance_path, 'scheduler.lock')
    os.makedirs(app.instance_path, exist_ok=True)

    lock_file = open(lock_file_path, 'w')
    try:
        fcntl.flock(lock_file.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
    except IOError:
        lock_file.close()
        logger.info("Another worker is running the scheduler - skipping initialization in this worker")
        return None

    interval = app.config['REFRESH_INTERVAL_MINUTES']
    scheduler = BackgroundScheduler()

    # First run fires immediately, max_instances=1 skips overlapping cycles
    scheduler.add_job(
        func=run_poll_cycle,
        args=[app],
        trigger=IntervalTrigger(minutes=interval),
        next_run_time=datetime.now(),
        id='poll_epex_price',
        name='Poll ENTSO-E day-ahead prices',
        max_instances=1,
        replace_existing=True
    )
    scheduler.start()
    logger.info(f"Polling initialized. Interval: {interval} minutes.")

    def cleanup():
        scheduler.shutdown()
        fcntl.flock(lock_file.fileno(), fcntl.LOCK_UN)
        lock_file.close()
        logger.info("Scheduler shut down and lock released")

    atexit.register(cleanup)
    return scheduler
