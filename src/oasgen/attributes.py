"""
Decorator attributes read by :class:`~oasgen.analysers.AttributeAnnotationFactory`.

The decorators only exist so annotated modules stay importable; they return
the decorated object unchanged. oasgen never imports the code it analyses,
it reads the decorator calls from the syntax tree::

    from oasgen import attributes as oa

    @oa.Get("/pets", summary="List pets", responses={"200": {"description": "OK"}})
    def list_pets():
        ...
"""

from typing import Any, TypeVar

__all__ = [
    "Attribute",
    "Info",
    "Server",
    "Tag",
    "Schema",
    "Get",
    "Put",
    "Post",
    "Delete",
    "Options",
    "Head",
    "Patch",
    "Trace",
]

T = TypeVar("T")


class Attribute:
    def __init__(self, *args: Any, **kwargs: Any) -> None:
        self.args = args
        self.kwargs = kwargs

    def __call__(self, target: T) -> T:
        return target

    def __repr__(self) -> str:
        return f"{type(self).__name__}(*{self.args!r}, **{self.kwargs!r})"


class Info(Attribute):
    pass


class Server(Attribute):
    pass


class Tag(Attribute):
    pass


class Schema(Attribute):
    pass


class Get(Attribute):
    pass


class Put(Attribute):
    pass


class Post(Attribute):
    pass


class Delete(Attribute):
    pass


class Options(Attribute):
    pass


class Head(Attribute):
    pass


class Patch(Attribute):
    pass


class Trace(Attribute):
    pass
