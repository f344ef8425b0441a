import typing


def english_enumerate(items: typing.Iterable[str], conj: str = ", and ") -> str:
    """
    Joins ``items`` the way an English sentence lists them: ``a, b, and c``.
    """
    _items = list(items)
    if len(_items) < 2:
        return "".join(_items)
    return ", ".join(_items[:-1]) + conj + _items[-1]
