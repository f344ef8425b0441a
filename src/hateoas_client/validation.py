import typing

from .exceptions import ValidationError
from .utils import is_blank


def validate_input_params(**params: typing.Any) -> None:
    """
    Raises :py:class:`ValidationError` naming every parameter that is ``None``
    or empty.  Called before any side effect takes place.
    """
    missing = [name for name, value in params.items() if is_blank(value)]
    if missing:
        raise ValidationError(missing)
