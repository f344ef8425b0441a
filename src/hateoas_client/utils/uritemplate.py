"""
:py:mod:`hateoas_client.utils.uritemplate` implements the expansion half of
`RFC 6570 <https://tools.ietf.org/html/rfc6570>`_ URI templates, up to level 4.

Synopsis
--------

.. code-block:: python

   from hateoas_client.utils import URITemplate

   tmpl = URITemplate("http://localhost/api/things/search/byName{?name,page,size}")
   tmpl.variable_names  # ("name", "page", "size")
   tmpl.expand({"name": "foo", "page": 0})
   # 'http://localhost/api/things/search/byName?name=foo&page=0'

Expressions that cannot be parsed are copied to the output untouched.
"""

import collections.abc
import dataclasses
import re
import typing
from urllib.parse import quote

EXPRESSION_RE = re.compile(r"\{([^{}]*)\}")
VARSPEC_RE = re.compile(r"^([A-Za-z0-9_%][A-Za-z0-9_.%]*)(?:(\*)|:([1-9][0-9]{0,3}))?$")

UNRESERVED_SAFE = ""
RESERVED_SAFE = ":/?#[]@!$&'()*+,;=%"


@dataclasses.dataclass(frozen=True)
class Operator:
    first: str
    sep: str
    named: bool
    ifemp: str
    allow_reserved: bool


OPERATORS: typing.Mapping[str, Operator] = {
    "": Operator("", ",", False, "", False),
    "+": Operator("", ",", False, "", True),
    "#": Operator("#", ",", False, "", True),
    ".": Operator(".", ".", False, "", False),
    "/": Operator("/", "/", False, "", False),
    ";": Operator(";", ";", True, "", False),
    "?": Operator("?", "&", True, "=", False),
    "&": Operator("&", "&", True, "=", False),
}


@dataclasses.dataclass(frozen=True)
class VarSpec:
    name: str
    explode: bool = False
    prefix: typing.Optional[int] = None


@dataclasses.dataclass(frozen=True)
class Expression:
    source: str
    operator: Operator
    varspecs: typing.Tuple[VarSpec, ...]


def _stringify(value: typing.Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _is_undefined(value: typing.Any) -> bool:
    if value is None:
        return True
    if isinstance(value, (collections.abc.Mapping, list, tuple)):
        return len(value) == 0
    return False


def _parse_expression(source: str) -> typing.Optional[Expression]:
    body = source
    op_char = ""
    if body and body[0] in OPERATORS:
        op_char = body[0]
        body = body[1:]
    varspecs = []
    for spec in body.split(","):
        m = VARSPEC_RE.match(spec)
        if m is None:
            return None
        varspecs.append(
            VarSpec(
                name=m.group(1),
                explode=m.group(2) is not None,
                prefix=int(m.group(3)) if m.group(3) is not None else None,
            )
        )
    return Expression(source=source, operator=OPERATORS[op_char], varspecs=tuple(varspecs))


class URITemplate:
    """
    A parsed URI template.

    :param str template: the template string, e.g. ``/things/{id}{?projection}``.
    """

    template: str
    _parts: typing.Sequence[typing.Union[str, Expression]]

    @property
    def variable_names(self) -> typing.Tuple[str, ...]:
        """
        Names of every variable referenced by the template, in order of appearance.
        """
        names: typing.List[str] = []
        for part in self._parts:
            if isinstance(part, Expression):
                for varspec in part.varspecs:
                    if varspec.name not in names:
                        names.append(varspec.name)
        return tuple(names)

    def _encode(self, op: Operator, value: str) -> str:
        return quote(value, safe=RESERVED_SAFE if op.allow_reserved else UNRESERVED_SAFE)

    def _expand_varspec(
        self, op: Operator, varspec: VarSpec, value: typing.Any
    ) -> typing.Optional[str]:
        if _is_undefined(value):
            return None

        if isinstance(value, collections.abc.Mapping):
            items = [(_stringify(k), _stringify(v)) for k, v in value.items()]
            if varspec.explode:
                return op.sep.join(
                    f"{self._encode(op, k)}={self._encode(op, v)}" for k, v in items
                )
            joined = ",".join(f"{self._encode(op, k)},{self._encode(op, v)}" for k, v in items)
            return f"{varspec.name}={joined}" if op.named else joined

        if isinstance(value, (list, tuple)):
            items = [_stringify(v) for v in value]
            if varspec.explode:
                if op.named:
                    return op.sep.join(
                        f"{varspec.name}={self._encode(op, v)}" if v else f"{varspec.name}{op.ifemp}"
                        for v in items
                    )
                return op.sep.join(self._encode(op, v) for v in items)
            joined = ",".join(self._encode(op, v) for v in items)
            return f"{varspec.name}={joined}" if op.named else joined

        s = _stringify(value)
        if varspec.prefix is not None:
            s = s[: varspec.prefix]
        encoded = self._encode(op, s)
        if op.named:
            return f"{varspec.name}={encoded}" if encoded else f"{varspec.name}{op.ifemp}"
        return encoded

    def _expand_expression(
        self, expr: Expression, variables: typing.Mapping[str, typing.Any]
    ) -> str:
        op = expr.operator
        expanded = []
        for varspec in expr.varspecs:
            v = self._expand_varspec(op, varspec, variables.get(varspec.name))
            if v is not None:
                expanded.append(v)
        if not expanded:
            return ""
        return op.first + op.sep.join(expanded)

    def expand(self, variables: typing.Optional[typing.Mapping[str, typing.Any]] = None) -> str:
        """
        Expands the template.  Variables that are not supplied are removed along with
        the literal characters their operator would have introduced.

        :param Optional[Mapping[str, Any]] variables: the variable values.
        :return: the expanded URI.
        """
        _variables = variables if variables is not None else {}
        buf = []
        for part in self._parts:
            if isinstance(part, Expression):
                buf.append(self._expand_expression(part, _variables))
            else:
                buf.append(part)
        return "".join(buf)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.template!r})"

    def __init__(self, template: str):
        self.template = template
        parts: typing.List[typing.Union[str, Expression]] = []
        pos = 0
        for m in EXPRESSION_RE.finditer(template):
            if m.start() > pos:
                parts.append(template[pos : m.start()])
            expr = _parse_expression(m.group(1))
            parts.append(expr if expr is not None else m.group(0))
            pos = m.end()
        if pos < len(template):
            parts.append(template[pos:])
        self._parts = parts


def expand_template(
    template: str, variables: typing.Optional[typing.Mapping[str, typing.Any]] = None
) -> str:
    return URITemplate(template).expand(variables)
