import logging
import os

_levels = {
    'debug': logging.DEBUG,
    'info': logging.INFO,
    'warn': logging.WARN,
    'error': logging.ERROR,
    'critical': logging.CRITICAL,
}


def formatted_logger(label, level=None, format=None, date_format=None, file_path=None):
    """ Return the logger `label` with a stream handler, and a file handler when `file_path` is given

    Calling this twice with the same label reuses the handlers already attached.
    """
    log = logging.getLogger(label)
    if level is None:
        level = logging.INFO
    else:
        level = _levels.get(level.lower(), logging.INFO)
    log.setLevel(level)

    if format is None:
        format = '%(asctime)s %(levelname)s:%(name)s:%(message)s'
    if date_format is None:
        date_format = '%Y-%m-%d %H:%M:%S'

    formatter = logging.Formatter(format, date_format)
    if not any(type(h) is logging.StreamHandler for h in log.handlers):
        stream_handler = logging.StreamHandler()
        stream_handler.setFormatter(formatter)
        log.addHandler(stream_handler)
    if file_path is not None:
        attached = [h.baseFilename for h in log.handlers if isinstance(h, logging.FileHandler)]
        if os.path.abspath(file_path) not in attached:
            file_handler = logging.FileHandler(file_path, encoding='utf-8')
            file_handler.setFormatter(formatter)
            log.addHandler(file_handler)
    return log
