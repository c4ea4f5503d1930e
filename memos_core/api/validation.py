"""Request body validation decorator.

@validate_request inspects the view's signature: path parameters pass
through unchanged, and the one parameter annotated with a pydantic model
is filled from the JSON body (or form data).

    @bp.put("/<memo_uid>")
    @validate_request
    def update_memo(memo_uid: str, data: MemoUpdate):
        ...
"""

import inspect
from functools import wraps

from flask import request
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from ..exceptions import ValidationError


def _body_parameter(f) -> tuple[str, type[BaseModel] | None]:
    params = list(inspect.signature(f).parameters.values())
    if not params:
        raise TypeError(f"{f.__name__} has no parameters to validate")

    for param in params:
        if param.annotation is inspect.Parameter.empty:
            raise TypeError(f"Parameter '{param.name}' of {f.__name__} lacks a type annotation")

    body = params[-1]
    if not (inspect.isclass(body.annotation) and issubclass(body.annotation, BaseModel)):
        return body.name, None
    return body.name, body.annotation


def _format_errors(e: PydanticValidationError) -> list[dict]:
    return [
        {
            "field": ".".join(str(part) for part in err["loc"]),
            "message": err["msg"],
            "expected_type": err["type"],
        }
        for err in e.errors()
    ]


def validate_request(f):
    """Parse and validate the request body into the view's model parameter.

    Raises:
        TypeError: At decoration time, if the view signature is unusable
        ValidationError: At request time, if the body does not validate
    """
    name, model = _body_parameter(f)

    @wraps(f)
    def wrapper(*args, **kwargs):
        if model is None:
            return f(*args, **kwargs)

        if request.is_json:
            received = request.get_json(silent=True)
        else:
            received = request.form.to_dict()
        if received is None:
            received = {}
        if not isinstance(received, dict):
            raise ValidationError(
                "Request body must be a JSON object",
                {"model": model.__name__, "received": received},
            )

        try:
            kwargs[name] = model(**received)
        except PydanticValidationError as e:
            raise ValidationError(
                "Invalid request data",
                {"model": model.__name__, "received": received, "errors": _format_errors(e)},
            )
        return f(*args, **kwargs)

    return wrapper
