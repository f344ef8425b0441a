import collections.abc
import typing


def is_blank(value: typing.Any) -> bool:
    """
    Tells if a required input is missing: ``None``, an empty string, or an empty collection.
    """
    if value is None:
        return True
    if isinstance(value, (str, bytes, collections.abc.Collection)):
        return len(value) == 0
    return False
