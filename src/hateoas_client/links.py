"""
Turning links and request options into URLs.

A templated link carries its parameters inside the URL, so its template is
expanded against the request params, the page and the sort order.  A literal
link is used as is and its parameters travel to the transport separately, as
produced by :py:func:`to_query_params`.
"""

import dataclasses
import typing
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from .declarations import GetOption, Options, PagedGetOption, PageParam, SortOrder
from .models import AbstractResource, Link
from .types import QueryParams
from .utils.uritemplate import EXPRESSION_RE, URITemplate


def _stringify(value: typing.Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, AbstractResource):
        href = value.self_href
        return href if href is not None else ""
    if isinstance(value, SortOrder):
        return value.value
    return str(value)


def _pairs(params: typing.Mapping[str, typing.Any]) -> typing.List[typing.Tuple[str, str]]:
    pairs: typing.List[typing.Tuple[str, str]] = []
    for name, value in params.items():
        if value is None:
            continue
        if isinstance(value, (list, tuple)):
            pairs.extend((name, _stringify(v)) for v in value if v is not None)
        else:
            pairs.append((name, _stringify(value)))
    return pairs


def _append_query(url: str, pairs: QueryParams) -> str:
    if not pairs:
        return url
    return url + ("&" if "?" in url else "?") + urlencode(list(pairs))


def _sort_values(sort: typing.Mapping[str, typing.Any]) -> typing.List[str]:
    return [f"{prop},{_stringify(order)}" for prop, order in sort.items()]


def expand(link: Link, params: typing.Optional[typing.Mapping[str, typing.Any]] = None) -> str:
    """
    Expands ``link`` against ``params``.

    Templated links go through URI template expansion; params the template does not
    reference are appended as a query string.  Literal links get every param appended.

    :param Link link: the link to expand.
    :param Optional[Mapping[str, Any]] params: the values to substitute.
    :return: a literal URL.
    """
    _params = params if params is not None else {}
    if not link.templated:
        return _append_query(link.href, _pairs(_params))

    template = URITemplate(link.href)
    variables = {
        name: value.self_href if isinstance(value, AbstractResource) else value
        for name, value in _params.items()
    }
    leftovers = {
        name: value for name, value in _params.items() if name not in template.variable_names
    }
    return _append_query(template.expand(variables), _pairs(leftovers))


def _template_variables(options: typing.Optional[Options]) -> typing.Dict[str, typing.Any]:
    variables: typing.Dict[str, typing.Any] = {}
    if options is None:
        return variables
    variables.update(options.params)
    if isinstance(options, PagedGetOption) and options.page is not None:
        variables["page"] = options.page.page
        variables["size"] = options.page.size
    if isinstance(options, GetOption) and options.sort:
        variables["sort"] = _sort_values(options.sort)
    return variables


def generate_link_url(link: Link, options: typing.Optional[Options] = None) -> str:
    """
    Builds the URL a relation link points to.  Only templated links are expanded;
    a literal link is returned as its bare ``href``.
    """
    if not link.templated:
        return link.href
    return expand(link, _template_variables(options))


def to_query_params(options: typing.Optional[Options]) -> QueryParams:
    """
    Flattens request options into ordered ``(name, value)`` pairs: the request
    params first, then ``page`` and ``size``, then one ``sort`` pair per property.
    """
    if options is None:
        return []
    pairs = _pairs(options.params)
    if isinstance(options, PagedGetOption) and options.page is not None:
        pairs.append(("page", str(options.page.page)))
        pairs.append(("size", str(options.page.size)))
    if isinstance(options, GetOption) and options.sort:
        pairs.extend(("sort", value) for value in _sort_values(options.sort))
    return pairs


def fill_default_page(
    options: typing.Optional[Options], default_page: typing.Optional[PageParam] = None
) -> PagedGetOption:
    """
    Returns paged options carrying ``default_page`` when ``options`` specify no page.
    The given options are never modified.

    :param Optional[Options] options: the caller's options.
    :param Optional[PageParam] default_page: the page to use, ``PageParam()`` by default.
    :return: a :py:class:`PagedGetOption`.
    """
    _default_page = default_page if default_page is not None else PageParam()
    if options is None:
        return PagedGetOption(page=_default_page)
    if isinstance(options, PagedGetOption):
        if options.page is not None or "page" in options.params or "size" in options.params:
            return options
        return dataclasses.replace(options, page=_default_page)
    if "page" in options.params or "size" in options.params:
        page = None
    else:
        page = _default_page
    if isinstance(options, GetOption):
        return PagedGetOption(
            params=options.params, sort=options.sort, use_cache=options.use_cache, page=page
        )
    return PagedGetOption(params=options.params, page=page)


def generate_resource_url(
    base_url: str, resource_name: str, query: typing.Optional[str] = None
) -> str:
    """
    Joins the API root, a resource name and an optional query path, e.g.
    ``http://localhost/api/things/search/byName``.
    """
    url = f"{base_url.rstrip('/')}/{resource_name.strip('/')}"
    if query:
        url = f"{url}/{query.lstrip('/')}"
    return url


def remove_template_params(href: str) -> str:
    return EXPRESSION_RE.sub("", href)


def strip_query_params(url: str, names: typing.Iterable[str]) -> str:
    """
    Removes the query params called ``names`` from ``url``, keeping every other part.
    """
    _names = set(names)
    parts = urlsplit(url)
    if not parts.query:
        return url
    kept = [
        (name, value)
        for name, value in parse_qsl(parts.query, keep_blank_values=True)
        if name not in _names
    ]
    return urlunsplit(parts._replace(query=urlencode(kept)))
