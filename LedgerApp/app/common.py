import logging

from LedgerApp.app import app

LOG_FORMAT = '[%(asctime)s] p%(process)s {%(pathname)s:%(lineno)d} %(levelname)s - %(message)s'
LOG_DATE_FORMAT = '%m-%d %H:%M:%S'

initiate_logging_done = False


def logging_initiate():
    global logger

    logger = logging.getLogger('LedgerApp')
    logger.setLevel(app.config.get('LEDGER_LOG_LEVEL', 'DEBUG'))

    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(logging.DEBUG)

    format = logging.Formatter(LOG_FORMAT, LOG_DATE_FORMAT)
    stream_handler.setFormatter(format)

    if not logger.handlers:
        logger.addHandler(stream_handler)

    logger.debug('Ledger: logging started for stream logging')


def check_logging_initiate():
    global initiate_logging_done

    if not initiate_logging_done:
        logging_initiate()
        logger.debug('Initiate logging done')
        initiate_logging_done = True


def config_value(name, default=None):
    """
    Read a value from the Flask config, falling back to default.
    Only storage-boundary services call this; report builders take explicit arguments.
    """
    value = app.config.get(name)
    if value is None:
        return default
    return value


logger = logging.getLogger('LedgerApp')
check_logging_initiate()
