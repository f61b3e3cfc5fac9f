import contextlib
import contextvars
import logging

# 日志前缀，例如 "[convert_batch n=2] "
request_context_var = contextvars.ContextVar('request_context', default='')

LOG_FORMAT = '[%(asctime)s] %(levelname)s in %(module)s: %(context)s%(message)s'


class ContextFilter(logging.Filter):
    """
    将上下文变量中的前缀注入到日志记录的 'context' 属性中。
    """
    def filter(self, record):
        record.context = request_context_var.get()
        return True


@contextlib.contextmanager
def log_context(tag):
    """在 with 块内为日志加上 "[tag] " 前缀，退出时恢复原值"""
    token = request_context_var.set(f'[{tag}] ')
    try:
        yield
    finally:
        request_context_var.reset(token)
