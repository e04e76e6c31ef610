import logging
from typing import Callable, Any, Tuple, Type
from functools import wraps
import time

logger = logging.getLogger(__name__)

def retry_with_backoff(
    max_retries: int = 3,
    initial_delay: float = 1.0,
    backoff_factor: float = 2.0,
    exceptions: Tuple[Type[BaseException], ...] = (Exception,),
):
    """
    decorator to retry a function with exponential backoff

    usage:
        @retry_with_backoff(max_retries=5, initial_delay=2.0)
        def fetch_remote_video(url):
            # ... code that might fail ...
    """
    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(*args, **kwargs) -> Any:
            delay = initial_delay
            last_exception = None

            for attempt in range(max_retries):
                try:
                    return func(*args, **kwargs)
                except exceptions as e:
                    last_exception = e
                    if attempt < max_retries - 1:
                        logger.warning(
                            f"{func.__name__} failed (attempt {attempt + 1}/{max_retries}): {str(e)}. "
                            f"retrying in {delay}s..."
                        )
                        time.sleep(delay)
                        delay *= backoff_factor
                    else:
                        logger.error(
                            f"{func.__name__} failed after {max_retries} attempts: {str(e)}"
                        )

            # all retries exhausted
            raise last_exception

        return wrapper
    return decorator


def handle_worker_error(job_id: str, error: Exception):
    """
    centralized error handler for worker jobs
    logs error with traceback so the failed job can be diagnosed
    """
    logger.error(f"job {job_id} failed: {error}", exc_info=True)


class VideoAIException(Exception):
    """base exception for videoai-specific errors"""
    pass


class TransportError(VideoAIException):
    """raised when the api server cannot be reached or the request times out"""
    pass


class VideoValidationError(VideoAIException):
    """raised when a file or remote url is rejected before any network call"""
    pass


class VideoProcessingError(VideoAIException):
    """raised when download, processing or clip cutting fails in a worker"""
    pass
