# Common utilities
from pdnslic.common.config import Config as Config
from pdnslic.common.logging_utils import setup_logger as setup_logger

__all__ = ["Config", "setup_logger"]
