"""
Detailed function logging with coloured terminal output
"""
import os
import logging
import colorlog
import functools
import inspect
import time

from .config import Config


class CustomLogger:
    """
    Custom logger class to handle detailed function logging with terminal output only
    """
    def __init__(self, name='galeguia'):
        # Create logger
        self.logger = logging.getLogger(name)
        self.logger.setLevel(logging.DEBUG)

        if not self.logger.handlers:
            # Create console handler with color formatting
            console_handler = colorlog.StreamHandler()
            console_handler.setLevel(logging.DEBUG)

            console_formatter = colorlog.ColoredFormatter(
                "%(log_color)s[%(asctime)s] %(levelname)-8s%(reset)s "
                "%(blue)s%(name)s %(bold_white)s%(funcName)s:%(lineno)d%(reset)s - "
                "%(message_log_color)s%(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
                log_colors=Config.LOG_COLORS,
                secondary_log_colors={
                    'message': {
                        'DEBUG': 'cyan',
                        'INFO': 'white',
                        'WARNING': 'yellow',
                        'ERROR': 'red',
                        'CRITICAL': 'red,bg_white',
                    }
                }
            )

            console_handler.setFormatter(console_formatter)
            self.logger.addHandler(console_handler)

    def log_function_call(self, func):
        """Decorator to log function calls with timing and parameters"""
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            func_name = func.__qualname__
            file_name = inspect.getfile(func)

            self.logger.info(
                f"→ Entering {func_name} [{os.path.basename(file_name)}]"
            )

            # Skip the bound instance when logging parameters
            shown_args = args[1:] if args and inspect.ismethod(getattr(args[0], func.__name__, None)) else args
            if shown_args or kwargs:
                params = []
                if shown_args:
                    params.append(f"args: {shown_args}")
                if kwargs:
                    params.append(f"kwargs: {kwargs}")
                self.logger.debug(f"Parameters: {', '.join(params)}")

            start_time = time.time()
            try:
                result = func(*args, **kwargs)
                execution_time = (time.time() - start_time) * 1000

                self.logger.info(
                    f"← Completed {func_name} in {execution_time:.2f}ms"
                )
                return result

            except Exception as e:
                execution_time = (time.time() - start_time) * 1000
                self.logger.error(
                    f"✕ Error in {func_name} after {execution_time:.2f}ms: "
                    f"{str(e)}", exc_info=True
                )
                raise

        return wrapper


# Initialize the custom logger
custom_logger = CustomLogger()
