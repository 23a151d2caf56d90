import logging
import time
from functools import wraps


def timeit(func):
    """装饰器，用于测量函数执行时间

    Args:
        func: 被装饰的函数

    Returns:
        wrapper: 包装后的函数
    """

    @wraps(func)
    def wrapper(*args, **kwargs):
        start_time = time.perf_counter()
        result = func(*args, **kwargs)
        elapsed = time.perf_counter() - start_time
        logging.getLogger(func.__module__).debug("函数 %s 执行耗时：%.4f秒", func.__qualname__, elapsed)
        return result

    return wrapper
