"""
:py:class:`HateoasClient` is the entry point of the library.

Synopsis
--------

.. code-block:: python

   from hateoas_client import HateoasClient, HateoasConfiguration, RequestBody
   from hateoas_client.implementations.httpx import HttpxTransport

   client = HateoasClient(
       HttpxTransport(),
       HateoasConfiguration.from_mapping({"baseUrl": "http://localhost:8080/api/v1"}),
   )
   thing = client.get_resource("things", 1)
   owner = thing.get_relation("owner")
   client.patch_resource(thing, RequestBody({"owner": owner}))

GET responses are cached when the configuration enables the cache, and every
successful mutation evicts the cached entries of the resource it touched.
"""

import typing

from .cache import CacheKey, ResourceCache
from .classifier import (
    PayloadKind,
    is_paged_resource_collection,
    is_resource,
    is_resource_collection,
)
from .config import HateoasConfiguration
from .declarations import (
    GetOption,
    HttpMethod,
    Options,
    PagedGetOption,
    RequestBody,
    RequestOption,
)
from .exceptions import InvalidDeclarationError, NotResourceShapedError, UnsupportedMethodError
from .interfaces import Transport
from .links import (
    fill_default_page,
    generate_resource_url,
    remove_template_params,
    to_query_params,
)
from .materializer import GraphMaterializer
from .models import AbstractResource, PagedResourceCollection, Resource, ResourceCollection
from .registry import TypeRegistry, default_registry
from .resolver import resolve_values
from .stages import Stage, StageLogger
from .types import JSONValue, QueryParams
from .validation import validate_input_params

ALLOWED_CUSTOM_QUERY_METHODS = (
    HttpMethod.GET.value,
    HttpMethod.POST.value,
    HttpMethod.PUT.value,
    HttpMethod.PATCH.value,
)

ResourceType = typing.Union[str, type]

SHAPE_CHECKS: typing.Mapping[
    PayloadKind, typing.Tuple[str, typing.Callable[[typing.Any], bool]]
] = {
    PayloadKind.RESOURCE: ("resource", is_resource),
    PayloadKind.COLLECTION: ("resource collection", is_resource_collection),
    PayloadKind.PAGED_COLLECTION: ("paged resource collection", is_paged_resource_collection),
}


def _use_cache(options: typing.Optional[Options]) -> bool:
    return options.use_cache if isinstance(options, GetOption) else True


def _is_projection(params: QueryParams) -> bool:
    return any(name == "projection" for name, _ in params)


class HateoasClient:
    transport: Transport
    config: HateoasConfiguration
    registry: TypeRegistry
    cache: ResourceCache
    stage_logger: StageLogger
    materializer: GraphMaterializer

    def _target(
        self, resource_type: ResourceType, options: typing.Optional[Options]
    ) -> typing.Tuple[str, typing.Optional[type], typing.Optional[Options]]:
        """
        Resolves ``resource_type`` into a resource name.  A class must have been registered
        as a resource or a projection; a projection class also puts its projection name
        into the request params.
        """
        if isinstance(resource_type, type):
            resource_name = self.registry.resource_name_of(resource_type)
            if resource_name is None:
                raise InvalidDeclarationError(
                    f"{resource_type!r} is not registered as a resource type or a projection"
                )
            return (
                resource_name,
                resource_type,
                self.registry.fill_projection_name(resource_type, options),
            )
        validate_input_params(resource_name=resource_type)
        return resource_type, None, options

    def _resource_url(self, resource_name: str, query: typing.Optional[str] = None) -> str:
        url = generate_resource_url(self.config.base_api_url, resource_name, query)
        self.stage_logger.stage_log(
            Stage.PREPARE_URL,
            result=url,
            base_url=self.config.base_api_url,
            resource=resource_name,
            query=query,
        )
        return url

    def _materialize_as(
        self,
        kind: PayloadKind,
        payload: JSONValue,
        is_projection: bool,
        resource_class: typing.Optional[type],
    ) -> typing.Any:
        if kind is PayloadKind.NONE:
            return self.materializer.materialize(payload, is_projection)
        expected, check = SHAPE_CHECKS[kind]
        if not check(payload):
            error = NotResourceShapedError(expected, payload)
            self.stage_logger.stage_error_log(Stage.INIT_RESOURCE, error=error.message)
            raise error
        if kind is PayloadKind.PAGED_COLLECTION:
            return self.materializer.instantiate_paged_resource_collection(payload, is_projection)
        elif kind is PayloadKind.COLLECTION:
            return self.materializer.instantiate_resource_collection(payload, is_projection)
        return self.materializer.instantiate_resource(payload, is_projection, resource_class)

    def fetch(
        self,
        url: str,
        kind: PayloadKind,
        params: QueryParams = (),
        use_cache: bool = True,
        is_projection: bool = False,
        headers: typing.Optional[typing.Mapping[str, str]] = None,
        resource_class: typing.Optional[type] = None,
    ) -> typing.Any:
        """
        Performs a GET request and materializes its response.

        :param str url: the URL to fetch.
        :param PayloadKind kind: the expected shape of the response.  A response of another
                                 shape raises :py:class:`NotResourceShapedError`, except for
                                 :py:attr:`PayloadKind.NONE`, which accepts anything.
        :param QueryParams params: query params.
        :param bool use_cache: whether the cache may serve or store the response.
        :param bool is_projection: whether the response is a projection.
        :param Optional[Mapping[str, str]] headers: extra request headers.
        :param Optional[type] resource_class: the class to materialize a single resource into.
        :return: the materialized response.
        """
        validate_input_params(url=url)
        caching = self.config.cache.enabled and use_cache
        key = CacheKey.of(url, params)
        if caching:
            cached = self.cache.get_resource(key)
            if cached is not None:
                return cached

        self.stage_logger.stage_log(Stage.HTTP_REQUEST, method="GET", url=url, params=params)
        payload = self.transport.request(
            "GET", url, headers=headers, params=list(params) or None
        )
        self.stage_logger.stage_log(Stage.HTTP_RESPONSE, method="GET", url=url, result=payload)

        result = self._materialize_as(kind, payload, is_projection, resource_class)
        if caching and result is not None:
            self.cache.put_resource(key, result)
        return result

    def send(
        self,
        method: str,
        url: str,
        body: typing.Any = None,
        params: QueryParams = (),
        headers: typing.Optional[typing.Mapping[str, str]] = None,
        is_projection: bool = False,
    ) -> typing.Any:
        """
        Performs a mutating request, evicts the cached entries of the resource the URL
        belongs to, and materializes the response.  ``body`` is sent as given.
        """
        validate_input_params(method=method, url=url)
        self.stage_logger.stage_log(
            Stage.HTTP_REQUEST, method=method, url=url, params=params, body=body
        )
        payload = self.transport.request(
            method, url, headers=headers, params=list(params) or None, body=body
        )
        self.stage_logger.stage_log(Stage.HTTP_RESPONSE, method=method, url=url, result=payload)
        if self.config.cache.enabled:
            self.cache.evict_resource(CacheKey.of(url, params, method))
        return self.materializer.materialize(payload, is_projection)

    def _resolve_body(self, request_body: typing.Optional[RequestBody]) -> typing.Any:
        body = resolve_values(request_body)
        self.stage_logger.stage_log(Stage.RESOLVE_VALUES, result=body)
        return body

    def _get(
        self,
        url: str,
        kind: PayloadKind,
        options: typing.Optional[Options],
        resource_class: typing.Optional[type] = None,
    ) -> typing.Any:
        params = to_query_params(options)
        self.stage_logger.stage_log(Stage.PREPARE_PARAMS, result=params)
        return self.fetch(
            url,
            kind,
            params=params,
            use_cache=_use_cache(options),
            is_projection=_is_projection(params),
            resource_class=resource_class,
        )

    def get_resource(
        self,
        resource_type: ResourceType,
        id: typing.Any,
        options: typing.Optional[GetOption] = None,
    ) -> typing.Optional[Resource]:
        """
        Fetches ``<root>/<resource name>/<id>``.

        :param ResourceType resource_type: a resource name, or a registered resource
                                           or projection class.
        :param Any id: the resource identifier.
        :param Optional[GetOption] options: request options.
        :return: the resource.
        :raises NotResourceShapedError: when the response is not a single resource.
        """
        validate_input_params(resource_type=resource_type, id=id)
        resource_name, resource_class, _options = self._target(resource_type, options)
        return self._get(
            self._resource_url(resource_name, str(id)),
            PayloadKind.RESOURCE,
            _options,
            resource_class,
        )

    def get_collection(
        self, resource_type: ResourceType, options: typing.Optional[GetOption] = None
    ) -> typing.Optional[ResourceCollection]:
        validate_input_params(resource_type=resource_type)
        resource_name, _, _options = self._target(resource_type, options)
        return self._get(self._resource_url(resource_name), PayloadKind.COLLECTION, _options)

    def get_page(
        self, resource_type: ResourceType, options: typing.Optional[PagedGetOption] = None
    ) -> typing.Optional[PagedResourceCollection]:
        """
        Fetches a page of ``<root>/<resource name>``.  The configured default page is
        requested when ``options`` carry none.
        """
        validate_input_params(resource_type=resource_type)
        resource_name, _, _options = self._target(resource_type, options)
        return self._get(
            self._resource_url(resource_name),
            PayloadKind.PAGED_COLLECTION,
            fill_default_page(_options, self.config.pagination.default_page),
        )

    def search_resource(
        self,
        resource_type: ResourceType,
        query: str,
        options: typing.Optional[GetOption] = None,
    ) -> typing.Optional[Resource]:
        validate_input_params(resource_type=resource_type, query=query)
        resource_name, resource_class, _options = self._target(resource_type, options)
        return self._get(
            self._resource_url(resource_name, f"search/{query}"),
            PayloadKind.RESOURCE,
            _options,
            resource_class,
        )

    def search_collection(
        self,
        resource_type: ResourceType,
        query: str,
        options: typing.Optional[GetOption] = None,
    ) -> typing.Optional[ResourceCollection]:
        validate_input_params(resource_type=resource_type, query=query)
        resource_name, _, _options = self._target(resource_type, options)
        return self._get(
            self._resource_url(resource_name, f"search/{query}"),
            PayloadKind.COLLECTION,
            _options,
        )

    def search_page(
        self,
        resource_type: ResourceType,
        query: str,
        options: typing.Optional[PagedGetOption] = None,
    ) -> typing.Optional[PagedResourceCollection]:
        validate_input_params(resource_type=resource_type, query=query)
        resource_name, _, _options = self._target(resource_type, options)
        return self._get(
            self._resource_url(resource_name, f"search/{query}"),
            PayloadKind.PAGED_COLLECTION,
            fill_default_page(_options, self.config.pagination.default_page),
        )

    def create_resource(
        self, resource_type: ResourceType, request_body: RequestBody
    ) -> typing.Any:
        """
        POSTs ``request_body`` to ``<root>/<resource name>``.

        :return: the materialized response body.
        """
        validate_input_params(resource_type=resource_type, request_body=request_body)
        resource_name, _, _ = self._target(resource_type, None)
        return self.send(
            HttpMethod.POST.value,
            self._resource_url(resource_name),
            body=self._resolve_body(request_body),
        )

    def update_resource(
        self, resource: AbstractResource, request_body: typing.Optional[RequestBody] = None
    ) -> typing.Any:
        """
        PUTs to the ``self`` link of ``resource``.  The resource itself is sent when no
        ``request_body`` is given.
        """
        validate_input_params(resource=resource)
        url = remove_template_params(resource.get_relation_link("self").href)
        return self.send(
            HttpMethod.PUT.value,
            url,
            body=self._resolve_body(
                request_body if request_body is not None else RequestBody(resource)
            ),
        )

    def patch_resource(self, resource: AbstractResource, request_body: RequestBody) -> typing.Any:
        validate_input_params(resource=resource, request_body=request_body)
        url = remove_template_params(resource.get_relation_link("self").href)
        return self.send(HttpMethod.PATCH.value, url, body=self._resolve_body(request_body))

    def delete_resource(
        self, resource: AbstractResource, options: typing.Optional[RequestOption] = None
    ) -> typing.Any:
        validate_input_params(resource=resource)
        url = remove_template_params(resource.get_relation_link("self").href)
        return self.send(HttpMethod.DELETE.value, url, params=to_query_params(options))

    def custom_query(
        self,
        resource_type: ResourceType,
        method: typing.Union[HttpMethod, str],
        query: str,
        body: typing.Any = None,
        options: typing.Optional[Options] = None,
    ) -> typing.Any:
        """
        Performs a request to ``<root>/<resource name>/<query>`` and materializes whatever
        comes back; responses that are not resource-shaped are returned as they are.
        GET responses bypass the cache.

        :param ResourceType resource_type: a resource name or a registered class.
        :param method: one of ``GET``, ``POST``, ``PUT`` or ``PATCH``.
        :param str query: the path appended to the resource URL.
        :param Any body: the request body.  A :py:class:`RequestBody` is resolved first.
        :param Optional[Options] options: request options.
        :raises UnsupportedMethodError: for any other method.
        """
        validate_input_params(resource_type=resource_type, method=method, query=query)
        _method = method.value if isinstance(method, HttpMethod) else str(method).upper()
        if _method not in ALLOWED_CUSTOM_QUERY_METHODS:
            error = UnsupportedMethodError(_method, ALLOWED_CUSTOM_QUERY_METHODS)
            self.stage_logger.stage_error_log(Stage.HTTP_REQUEST, error=error.message)
            raise error

        resource_name, _, _options = self._target(resource_type, options)
        url = self._resource_url(resource_name, query)
        params = to_query_params(_options)
        self.stage_logger.stage_log(Stage.PREPARE_PARAMS, result=params)
        if _method == HttpMethod.GET.value:
            return self.fetch(
                url,
                PayloadKind.NONE,
                params=params,
                use_cache=False,
                is_projection=_is_projection(params),
            )
        return self.send(
            _method,
            url,
            body=self._resolve_body(body) if isinstance(body, RequestBody) else body,
            params=params,
            is_projection=_is_projection(params),
        )

    def close(self) -> None:
        self.transport.close()

    def __enter__(self) -> "HateoasClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def __init__(
        self,
        transport: Transport,
        config: typing.Optional[HateoasConfiguration] = None,
        registry: typing.Optional[TypeRegistry] = None,
        cache: typing.Optional[ResourceCache] = None,
    ):
        self.transport = transport
        self.config = config if config is not None else HateoasConfiguration()
        self.registry = registry if registry is not None else default_registry
        self.stage_logger = StageLogger(verbose=self.config.logs.verbose_logs)
        self.cache = (
            cache
            if cache is not None
            else ResourceCache(
                self.config.base_api_url,
                life_time=self.config.cache.life_time,
                stage_logger=self.stage_logger,
            )
        )
        self.materializer = GraphMaterializer(
            self.registry,
            default_page_size=self.config.pagination.default_page.size,
            client=self,
            stage_logger=self.stage_logger,
            base_api_url=self.config.base_api_url,
        )
