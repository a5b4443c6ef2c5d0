"""
Cyclone Simulation Logging Utility
Dual logging to file and console
"""
import logging
import sys
from datetime import datetime
import os

class SimLogger:
    """Handles dual logging for cyclone simulation runs"""

    def __init__(self, run_name='CYCLONE', run_id=None, log_dir='logs', level=logging.INFO):
        """
        Setup logging to both file and console

        Args:
            run_name: Label for the run (basin code, scenario name, ...)
            run_id: Optional run identifier (usually the random seed)
            log_dir: Directory to save logs (default: 'logs')
            level: Minimum level written by both handlers
        """
        if not os.path.exists(log_dir):
            os.makedirs(log_dir)

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        run_suffix = f"_run{run_id}" if run_id is not None else ""
        self.log_filename = os.path.join(
            log_dir,
            f"cyclone_{run_name}_{timestamp}{run_suffix}.log"
        )

        self.logger = logging.getLogger(f'cyclone_sim_{run_name}_{timestamp}{run_suffix}')
        self.logger.setLevel(level)
        self.logger.propagate = False

        # Remove any existing handlers
        self.logger.handlers = []

        # File handler (saves everything)
        file_handler = logging.FileHandler(self.log_filename, mode='w', encoding='utf-8')
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter('%(message)s'))

        # Console handler (shows on screen)
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(level)
        console_handler.setFormatter(logging.Formatter('%(message)s'))

        self.logger.addHandler(file_handler)
        self.logger.addHandler(console_handler)

        self.info("=" * 80)
        self.info("CYCLONE SIMULATION LOG")
        self.info("=" * 80)
        self.info(f"Run: {run_name}" + (f" (id {run_id})" if run_id is not None else ""))
        self.info(f"Log file: {self.log_filename}")
        self.info(f"Start time: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
        self.info("=" * 80)
        self.info("")

    def debug(self, message):
        self.logger.debug(message)

    def info(self, message):
        """Log info message to both file and console"""
        self.logger.info(message)

    def warning(self, message):
        self.logger.warning(f"WARNING: {message}")

    def error(self, message):
        self.logger.error(f"ERROR: {message}")

    def close(self):
        """Close all handlers"""
        for handler in list(self.logger.handlers):
            handler.close()
            self.logger.removeHandler(handler)

    def get_filename(self):
        return self.log_filename


# Global logger instance (set by the simulation driver)
_global_logger = None

def setup_global_logger(run_name='CYCLONE', run_id=None, log_dir='logs', level=logging.INFO):
    """Setup global logger for use throughout codebase"""
    global _global_logger
    if _global_logger is not None:
        _global_logger.close()
    _global_logger = SimLogger(run_name, run_id, log_dir, level)
    return _global_logger

def get_logger():
    """Get the global logger instance"""
    return _global_logger

def close_global_logger():
    global _global_logger
    if _global_logger is not None:
        _global_logger.close()
        _global_logger = None

def log_debug(message):
    """Per-tick detail; dropped unless a global logger is installed"""
    if _global_logger:
        _global_logger.debug(message)

def log_info(message):
    """Convenience function to log info"""
    if _global_logger:
        _global_logger.info(message)
    else:
        print(message)

def log_warning(message):
    if _global_logger:
        _global_logger.warning(message)
    else:
        print(f"WARNING: {message}")

def log_error(message):
    if _global_logger:
        _global_logger.error(message)
    else:
        print(f"ERROR: {message}")
