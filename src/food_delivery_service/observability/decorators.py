"""OpenTelemetry tracing decorators."""

import functools
import inspect
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any, TypeVar

from opentelemetry import trace
from opentelemetry.trace import Span

from food_delivery_service.observability.config import DEFAULT_SERVICE_NAME

F = TypeVar("F", bound=Callable[..., Any])


@contextmanager
def _span(tracer: trace.Tracer, name: str, func_name: str, service_name: str) -> Iterator[Span]:
    with tracer.start_as_current_span(name) as span:
        span.set_attribute("service.name", service_name)
        if name != func_name:
            span.set_attribute("function.name", func_name)
        try:
            yield span
        except Exception as e:
            span.set_attribute("success", False)
            span.set_attribute("error.type", type(e).__name__)
            span.set_attribute("error.message", str(e))
            span.record_exception(e)
            raise
        span.set_attribute("success", True)


def traced(
    span_name: str | None = None, service_name: str = DEFAULT_SERVICE_NAME
) -> Callable[[F], F]:
    """Wrap a sync or async function in an OpenTelemetry span.

    Exceptions are recorded on the span and re-raised.

    Args:
        span_name: Name for the span (defaults to the function name)
        service_name: Value of the ``service.name`` span attribute

    Example:
        @traced("update_menu_item")
        async def update_menu_item(self, item_id: int, patch: MenuItemPatch) -> MenuItem | None:
            ...
    """

    def decorator(func: F) -> F:
        name = span_name or func.__name__
        tracer = trace.get_tracer(service_name)

        if inspect.iscoroutinefunction(func):

            @functools.wraps(func)
            async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
                with _span(tracer, name, func.__name__, service_name):
                    return await func(*args, **kwargs)

            return async_wrapper  # type: ignore

        @functools.wraps(func)
        def sync_wrapper(*args: Any, **kwargs: Any) -> Any:
            with _span(tracer, name, func.__name__, service_name):
                return func(*args, **kwargs)

        return sync_wrapper  # type: ignore

    return decorator
