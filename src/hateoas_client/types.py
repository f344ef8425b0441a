import typing

JSONScalar = typing.Union[bool, int, float, str]
JSONObject = typing.Mapping[str, typing.Any]
JSONValue = typing.Union[JSONScalar, typing.Sequence[typing.Any], JSONObject, None]
QueryParams = typing.Sequence[typing.Tuple[str, str]]
