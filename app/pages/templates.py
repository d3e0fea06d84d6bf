import functools

from fasthtml.common import *


def app_template(title: str):
    """Wrap a page handler's content in the shared document layout."""
    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            content = func(*args, **kwargs)
            return Title(f"{title} | PowerClock"), Div(
                content,
                cls="h-full w-full min-h-screen flex flex-col justify-center items-center text-center",
            )
        return wrapper
    return decorator
