import logging
import os
import json
from logging.handlers import TimedRotatingFileHandler
from datetime import datetime

from gymtrack.core.config import settings


class JsonFormatter(logging.Formatter):
    def format(self, record):
        log_record = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        # file location and stack trace only for errors
        if record.levelno >= logging.ERROR:
            log_record["location"] = f"{record.pathname}:{record.lineno}"
            if record.exc_info:
                log_record["stack_trace"] = self.formatException(record.exc_info)
        return json.dumps(log_record, ensure_ascii=False)

def setup_logging(log_dir: str = None, to_file: bool = True):
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.INFO)

    # quiet noisy libraries
    logging.getLogger("sqlalchemy.engine").setLevel(logging.ERROR)
    logging.getLogger("apscheduler").setLevel(logging.ERROR)
    logging.getLogger("uvicorn.access").setLevel(logging.ERROR)
    logging.getLogger("uvicorn.error").setLevel(logging.ERROR)
    logging.getLogger("watchfiles").setLevel(logging.ERROR)

    if getattr(root_logger, "_gymtrack_configured", False):
        return
    root_logger._gymtrack_configured = True

    if to_file:
        log_dir = log_dir or settings.LOG_DIR
        os.makedirs(log_dir, exist_ok=True)

        # daily rotation, 7 days kept
        file_handler = TimedRotatingFileHandler(
            filename=os.path.join(log_dir, "gymtrack.log"),
            when="midnight", interval=1, backupCount=7, encoding="utf-8"
        )
        file_handler.setFormatter(JsonFormatter())
        root_logger.addHandler(file_handler)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(JsonFormatter())
    root_logger.addHandler(console_handler)
