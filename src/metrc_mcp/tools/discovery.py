"""Build the tool catalog by scanning the tool modules."""

from __future__ import annotations

import importlib
import inspect
import pkgutil
from types import ModuleType
from typing import Iterator, List, Optional, Type

from .core import Tool, ToolRegistry

# Infrastructure modules in this package that declare no tools.
_NON_TOOL_MODULES = frozenset({"core", "base", "discovery", "dispatcher"})


def _tool_modules(package_name: str) -> Iterator[ModuleType]:
    package = importlib.import_module(package_name)
    infos = sorted(pkgutil.iter_modules(package.__path__), key=lambda info: info.name)
    for info in infos:
        if info.name in _NON_TOOL_MODULES:
            continue
        yield importlib.import_module(f"{package_name}.{info.name}")


def _declared_tools(module: ModuleType) -> Iterator[Type[Tool]]:
    """Concrete tools defined in ``module``, in source order."""
    for obj in vars(module).values():
        if not (inspect.isclass(obj) and issubclass(obj, Tool)):
            continue
        if obj.__module__ != module.__name__:
            continue
        # Shared bases are private or leave ``name`` unset.
        if obj.__name__.startswith("_") or not getattr(obj, "name", None):
            continue
        yield obj


def discover_tool_classes(package_name: Optional[str] = None) -> List[Type[Tool]]:
    """Tool classes under ``package_name`` (this package by default).

    Modules are taken in name order and classes in definition order, so
    the catalog order is the same on every run.
    """
    classes: List[Type[Tool]] = []
    for module in _tool_modules(package_name or __name__.rpartition(".")[0]):
        classes.extend(cls for cls in _declared_tools(module) if cls not in classes)
    return classes


def build_tool_registry(package_name: Optional[str] = None) -> ToolRegistry:
    return ToolRegistry([tool_cls() for tool_cls in discover_tool_classes(package_name)])
