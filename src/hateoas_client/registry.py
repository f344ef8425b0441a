import dataclasses
import enum
import typing
from collections import OrderedDict

from .declarations import Options, RequestOption
from .exceptions import InvalidDeclarationError
from .models import (
    BaseResource,
    EmbeddedResource,
    PagedResourceCollection,
    Resource,
    ResourceCollection,
)
from .utils import is_blank


class ResourceKind(enum.Enum):
    RESOURCE = "resource"
    EMBEDDED = "embedded"
    COLLECTION = "collection"
    PAGED_COLLECTION = "paged_collection"
    PROJECTION = "projection"


BASE_CLASSES: typing.Mapping[ResourceKind, type] = {
    ResourceKind.RESOURCE: Resource,
    ResourceKind.EMBEDDED: EmbeddedResource,
    ResourceKind.COLLECTION: ResourceCollection,
    ResourceKind.PAGED_COLLECTION: PagedResourceCollection,
    ResourceKind.PROJECTION: Resource,
}


@dataclasses.dataclass(frozen=True)
class ProjectionRegistration:
    class_: type
    resource_name: str
    projection_name: str


class TypeRegistry:
    """
    A :py:class:`TypeRegistry` maps resource names and relation names to the classes
    nodes get materialized into.  Registration is expected to be complete before the
    first materialization; registering a name again replaces the previous class.
    """

    _types: typing.Dict[ResourceKind, "OrderedDict[str, type]"]
    _projections: "OrderedDict[str, ProjectionRegistration]"
    _projection_relations: "OrderedDict[str, type]"

    def _check_class(self, kind: ResourceKind, class_: typing.Any) -> None:
        base = BASE_CLASSES[kind]
        if not isinstance(class_, type) or not issubclass(class_, base):
            raise InvalidDeclarationError(
                f"{kind.value} registration accepts only subclasses of {base.__name__}, got {class_!r}"
            )

    def register(
        self,
        kind: ResourceKind,
        name: str,
        class_: type,
        projection_name: typing.Optional[str] = None,
    ) -> None:
        """
        Registers ``class_`` under ``name`` for the given kind.

        :param ResourceKind kind: the kind of node the class materializes.
        :param str name: a resource name, or a relation name for embedded resources.
        :param type class_: the class to register.
        :param Optional[str] projection_name: required for :py:attr:`ResourceKind.PROJECTION`.
        """
        if is_blank(name):
            raise InvalidDeclarationError(
                f"registration of {class_!r} requires a non-empty name, got {name!r}"
            )
        self._check_class(kind, class_)
        if kind is ResourceKind.PROJECTION:
            if is_blank(projection_name):
                raise InvalidDeclarationError(
                    f"projection {class_!r} requires a non-empty projection name"
                )
            self._projections[name] = ProjectionRegistration(
                class_=class_,
                resource_name=name,
                projection_name=typing.cast(str, projection_name),
            )
        else:
            self._types[kind][name] = class_

    def resolve(self, kind: ResourceKind, name: typing.Optional[str]) -> type:
        """
        Returns the class registered under ``name``, or the generic class of ``kind``
        when nothing is registered.
        """
        if kind is ResourceKind.PROJECTION:
            projection_class = self.resolve_projection(name)
            return projection_class if projection_class is not None else Resource
        if name is not None:
            class_ = self._types[kind].get(name)
            if class_ is not None:
                return class_
        return BASE_CLASSES[kind]

    def resolve_projection(self, resource_name: typing.Optional[str]) -> typing.Optional[type]:
        if resource_name is None:
            return None
        registration = self._projections.get(resource_name)
        return registration.class_ if registration is not None else None

    def resolve_projection_relation(self, property_name: str) -> typing.Optional[type]:
        return self._projection_relations.get(property_name)

    def resource_name_of(self, class_: type) -> typing.Optional[str]:
        for name, registered in self._types[ResourceKind.RESOURCE].items():
            if registered is class_:
                return name
        for registration in self._projections.values():
            if registration.class_ is class_:
                return registration.resource_name
        return None

    def projection_name_of(self, class_: type) -> typing.Optional[str]:
        for registration in self._projections.values():
            if registration.class_ is class_:
                return registration.projection_name
        return None

    def fill_projection_name(
        self, class_: typing.Optional[type], options: typing.Optional[Options]
    ) -> typing.Optional[Options]:
        """
        Puts the projection name of ``class_`` into the ``projection`` request param,
        replacing any value the caller gave.  Options are returned untouched when
        ``class_`` is not a registered projection.
        """
        projection_name = self.projection_name_of(class_) if class_ is not None else None
        if projection_name is None:
            return options
        if options is None:
            return RequestOption(params={"projection": projection_name})
        params = OrderedDict(options.params)
        params["projection"] = projection_name
        return dataclasses.replace(options, params=params)

    def register_resource_type(self, resource_name: str, class_: type) -> None:
        self.register(ResourceKind.RESOURCE, resource_name, class_)

    def register_embedded_type(self, relation_names: typing.Iterable[str], class_: type) -> None:
        _relation_names = (
            [relation_names] if isinstance(relation_names, str) else list(relation_names or ())
        )
        if not _relation_names:
            raise InvalidDeclarationError(
                f"embedded resource {class_!r} requires at least one relation name"
            )
        for relation_name in _relation_names:
            self.register(ResourceKind.EMBEDDED, relation_name, class_)

    def register_projection(
        self, resource_class: type, projection_name: str, class_: type
    ) -> None:
        if resource_class is None:
            raise InvalidDeclarationError(f"projection {class_!r} requires a resource type")
        resource_name = self.resource_name_of(resource_class)
        if resource_name is None:
            raise InvalidDeclarationError(
                f"{resource_class!r} must be registered as a resource type before its projections"
            )
        self.register(ResourceKind.PROJECTION, resource_name, class_, projection_name)

    def register_projection_relation(self, property_name: str, relation_class: type) -> None:
        if is_blank(property_name):
            raise InvalidDeclarationError("projection relation requires a non-empty property name")
        if not isinstance(relation_class, type) or not issubclass(relation_class, BaseResource):
            raise InvalidDeclarationError(
                f"projection relation {property_name} accepts only subclasses of BaseResource, got {relation_class!r}"
            )
        self._projection_relations[property_name] = relation_class

    def clear(self) -> None:
        for types in self._types.values():
            types.clear()
        self._projections.clear()
        self._projection_relations.clear()

    def __init__(self):
        self._types = {
            kind: OrderedDict() for kind in ResourceKind if kind is not ResourceKind.PROJECTION
        }
        self._projections = OrderedDict()
        self._projection_relations = OrderedDict()


default_registry = TypeRegistry()
