import logging
import logging.config


def setup_structured_logging(level: str = "INFO") -> None:
    """
    Configures Python's logging to output JSON lines on stdout.
    Fields passed through `extra=` (loan_id, tx_hash, ...) become keys
    of the log record.
    """
    config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "json": {
                "()": "pythonjsonlogger.json.JsonFormatter",
                "fmt": "%(asctime)s %(name)s %(levelname)s %(message)s"
            }
        },
        "handlers": {
            "json": {
                "class": "logging.StreamHandler",
                "formatter": "json",
                "stream": "ext://sys.stdout"
            }
        },
        "root": {
            "handlers": ["json"],
            "level": level
        }
    }
    logging.config.dictConfig(config)
    # web3 and its HTTP stack are chatty at DEBUG
    logging.getLogger("web3").setLevel(max(logging.getLevelName(level), logging.INFO))
