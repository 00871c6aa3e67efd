"""Router with request injection and response handling."""

import inspect
from collections.abc import Callable, Iterable
from functools import wraps
from typing import Any

import orjson
from pydantic import BaseModel
from robyn import Request, Response, SubRouter, status_codes
from robyn.robyn import HttpMethod


def empty_response(status_code: int) -> Response:
    """Response with no body, as expected by webhook relays."""
    return Response(status_code=status_code, headers={}, description="")


def parse_response(result: Any) -> Response:
    """Convert handler result to Response."""
    match result:
        case Response():
            return result
        case None:
            return empty_response(status_codes.HTTP_200_OK)
        case BaseModel():
            return Response(
                status_code=status_codes.HTTP_200_OK,
                headers={"content-type": "application/json"},
                description=result.model_dump_json(),
            )
        case dict():
            return Response(
                status_code=status_codes.HTTP_200_OK,
                headers={"content-type": "application/json"},
                description=orjson.dumps(result).decode(),
            )
        case _:
            return Response(
                status_code=status_codes.HTTP_200_OK,
                headers={},
                description=str(result),
            )


HTTP_METHODS = (
    HttpMethod.GET,
    HttpMethod.POST,
    HttpMethod.PUT,
    HttpMethod.DELETE,
    HttpMethod.PATCH,
    HttpMethod.OPTIONS,
    HttpMethod.HEAD,
    HttpMethod.TRACE,
    HttpMethod.CONNECT,
)


def method_name(method: HttpMethod) -> str:
    """SubRouter attribute name for an HttpMethod, e.g. HttpMethod.POST -> 'post'."""
    return str(method).split(".")[-1].lower()


def build_handler_signature(sig: inspect.Signature) -> inspect.Signature:
    """Signature exposed to Robyn: always starts with request so Robyn injects it."""
    new_params = [inspect.Parameter("request", inspect.Parameter.POSITIONAL_OR_KEYWORD, annotation=Request)]
    new_params.extend(param for name, param in sig.parameters.items() if name != "request")
    return sig.replace(parameters=new_params)


def _create_method_wrapper(original_method: Callable) -> Callable:
    @wraps(original_method)
    def method_wrapper(*args, **kwargs) -> Callable:
        decorator = original_method(*args, **kwargs)

        def handler_decorator(handler: Callable) -> Callable:
            sig = inspect.signature(handler)
            has_request_param = "request" in sig.parameters

            @wraps(handler)
            async def wrapped_handler(request: Request, **h_kwargs):
                # Pass request to handler only if it declared it
                if has_request_param:
                    h_kwargs["request"] = request

                result = await handler(**h_kwargs)
                return parse_response(result)

            wrapped_handler.__signature__ = build_handler_signature(sig)  # type: ignore[attr-defined]
            return decorator(wrapped_handler)

        return handler_decorator

    return method_wrapper


class Router(SubRouter):
    """SubRouter with request injection, response handling and multi-method routes."""

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._wrap_methods()

    def _wrap_methods(self) -> None:
        """Wrap HTTP methods with response handling."""
        for method in HTTP_METHODS:
            name = method_name(method)
            if hasattr(self, name):
                setattr(self, name, _create_method_wrapper(getattr(self, name)))

    def route(self, endpoint: str, methods: Iterable[HttpMethod] = HTTP_METHODS) -> Callable:
        """Register one handler for several HTTP methods on the same endpoint."""

        def decorator(handler: Callable) -> Callable:
            for method in methods:
                if register := getattr(self, method_name(method), None):
                    register(endpoint)(handler)
            return handler

        return decorator
