import logging

DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


class AnalysisFormatter(logging.Formatter):
    """Console format: one line per message, logger name included"""
    def __init__(self):
        super().__init__(
            fmt='%(asctime)s - %(levelname)s - %(name)s - %(message)s',
            datefmt=DATE_FORMAT
        )


class DetailedAnalysisFormatter(logging.Formatter):
    """File format; the process id separates grid-search workers"""
    def __init__(self):
        super().__init__(
            fmt='%(asctime)s - %(levelname)s - [%(name)s pid=%(process)d] - %(message)s '
                '(%(funcName)s in %(filename)s:%(lineno)d)',
            datefmt=DATE_FORMAT
        )
