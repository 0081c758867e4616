"""Thin layer over dependency_injector's wiring.

`Provide`, `Manage` and `as_` are used as parameter defaults, `inject`
decorates functions that use them. Modules of registered packages that are
imported after boot are wired as they load.
"""

from __future__ import annotations

__all__ = [
    "Manage",
    "NotReady",
    "Provide",
    "as_",
    "inject",
    "register_loader_containers",
]

import functools
import importlib.machinery
import sys
import types
import typing as t

import dependency_injector.wiring as wiring
from dependency_injector.containers import Container
from dependency_injector.providers import Provider
from dependency_injector.wiring import ClassGetItemMeta, Closing, Provide, TypeModifier

from assessor.lib.sentinel import NotReady

P = t.ParamSpec("P")
R = t.TypeVar("R")
T = t.TypeVar("T")


def inject(fn: t.Callable[P, R]) -> t.Callable[P, R]:
    reference_injections, reference_closing = wiring._fetch_reference_injections(fn)  # pyright: ignore [reportPrivateUsage] noqa: E501
    patched = wiring._get_patched(fn, reference_injections, reference_closing)  # pyright: ignore [reportPrivateUsage] noqa: E501

    # FastAPI resolves a route's annotations against the route module's globals
    if fn.__module__.startswith("assessor.web"):
        return functools.wraps(fn, updated=("__globals__",))(patched)
    return patched


class Manage(object, metaclass=ClassGetItemMeta):
    """`Manage["storage.persistent.session"]`: inject a provided resource and close it after the call"""

    def __new__(cls, provider: Provider[T] | Container | str):
        return Closing[Provide[provider]]

    @classmethod
    def __class_getitem__(cls, item: Provider[T] | Container | str):
        return cls(item)


def as_(type_: type[T]) -> TypeModifier:
    """Convert a provided configuration mapping into `type_`"""
    return TypeModifier(type_)


class WiringLoader(importlib.machinery.SourceFileLoader):
    """Source loader which wires each module of a registered package once it has executed"""

    registry: t.ClassVar[dict[str, list[Container]]] = {}

    def exec_module(self, module: types.ModuleType) -> None:
        super().exec_module(module)
        for package, cts in self.registry.items():
            if module.__name__ == package or module.__name__.startswith(package + "."):
                for ct in cts:
                    ct.wire(modules=[module])


_path_hook = importlib.machinery.FileFinder.path_hook(
    (importlib.machinery.ExtensionFileLoader, importlib.machinery.EXTENSION_SUFFIXES),
    (WiringLoader, importlib.machinery.SOURCE_SUFFIXES),
    (importlib.machinery.SourcelessFileLoader, importlib.machinery.BYTECODE_SUFFIXES),
)


def register_loader_containers(*containers: Container, packages: t.Sequence[str]) -> None:
    """Wire `containers` into modules of `packages` imported from now on."""
    for package in packages:
        registered = WiringLoader.registry.setdefault(package, [])
        registered.extend(ct for ct in containers if ct not in registered)

    if _path_hook not in sys.path_hooks:
        sys.path_hooks.insert(0, _path_hook)
        sys.path_importer_cache.clear()
