from .logger import logger, setup_logger, set_log_level

__all__ = ['logger', 'setup_logger', 'set_log_level']
