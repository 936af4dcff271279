"""Generation context: namespaces, type registries and import bookkeeping."""

from __future__ import annotations

import copy
import enum
from dataclasses import dataclass, field
from typing import Any, Optional

from .ast import Ident, ImportDecl, wrap
from .options import Options


class Syntax(enum.Enum):
    """Syntax of a proto file."""

    PROTO3 = "proto3"
    PROTO2 = "proto2"
    UNSPECIFIED = "unspecified"

    @classmethod
    def parse(cls, value: str) -> "Syntax":
        """Parse the syntax field of a file descriptor; empty means proto2."""
        if value == "proto3":
            return cls.PROTO3
        if value in ("proto2", ""):
            return cls.PROTO2
        raise ValueError(f"unknown syntax {value!r}")


class TypeResolutionError(LookupError):
    """A referenced type is not provided by any known proto file."""


def _components(path: str) -> list[str]:
    return [part for part in path.split("/") if part not in ("", ".")]


def _parent(path: str) -> str:
    head, sep, _ = path.rpartition("/")
    if not sep:
        return ""
    return head or "/"


def _diff_paths(path: str, base: str) -> Optional[str]:
    path_absolute, base_absolute = path.startswith("/"), base.startswith("/")
    if path_absolute != base_absolute:
        return path if path_absolute else None

    remaining_path, remaining_base = iter(_components(path)), iter(_components(base))
    parts: list[str] = []
    while True:
        a, b = next(remaining_path, None), next(remaining_base, None)
        if a is None and b is None:
            break
        if b is None:
            parts.append(a)
            parts.extend(remaining_path)
            break
        if a is None:
            parts.append("..")
            continue
        if not parts and a == b:
            continue
        if b == "..":
            return None
        parts.append("..")
        parts.extend(".." for _ in remaining_base)
        parts.append(a)
        parts.extend(remaining_path)
        break
    return "/".join(parts)


def resolve_relative(source: str, target: str) -> str:
    """Path of ``source`` as seen from the directory of ``target``."""
    filename = source.rpartition("/")[2]
    if filename in ("", ".", ".."):
        raise ValueError(f"expected path to have a file name: {source!r}")
    common = _diff_paths(_parent(source), _parent(target))
    root = f"./{common}" if common else "."
    return f"{root}/{filename}"


@dataclass
class _Registry:
    types: dict[str, str] = field(default_factory=dict)
    map_types: dict[str, Any] = field(default_factory=dict)
    leading_enum_members: dict[str, int] = field(default_factory=dict)


@dataclass
class _Imports:
    declarations: list[ImportDecl] = field(default_factory=list)
    named: dict[str, list[str]] = field(default_factory=dict)


class Context:
    """State shared while generating code for a set of proto files.

    Registries are shared by every context derived from one root; pending
    imports are shared by ``descend`` but are fresh after ``fork``.
    """

    def __init__(self, options: Options, syntax: Syntax = Syntax.UNSPECIFIED) -> None:
        self.options = options
        self.syntax = syntax
        self.name = ""
        self.namespace: tuple[str, ...] = ()
        self._registry = _Registry()
        self._imports = _Imports()

    def _derive(self, **changes: Any) -> "Context":
        other = copy.copy(self)
        for attribute, value in changes.items():
            setattr(other, attribute, value)
        return other

    def fork(self, name: str, syntax: Syntax) -> "Context":
        """A context for another file, with its own pending imports."""
        return self._derive(name=name, syntax=syntax, _imports=_Imports())

    def descend(self, namespace: str) -> "Context":
        """A context one namespace level deeper."""
        return self._derive(namespace=(*self.namespace, namespace))

    def get_namespace(self) -> str:
        return ".".join(self.namespace)

    def drain_imports(self) -> list[ImportDecl]:
        """Return all pending import declarations and forget them."""
        state = self._imports
        for source, names in state.named.items():
            if names:
                state.declarations.append(ImportDecl(list(names), source))
        state.named.clear()
        drained = list(state.declarations)
        state.declarations.clear()
        return drained

    def _add_fixed_import(self, names: list[str], source: str) -> None:
        if source not in self._imports.named:
            self._imports.declarations.append(ImportDecl(names, source))
            self._imports.named[source] = []

    def add_sendable_import(self, source: str) -> None:
        self._add_fixed_import(["collections"], source)

    def add_protobuf_import(self, source: str) -> None:
        self._add_fixed_import(["BinaryReader", "BinaryWriter"], source)

    def add_base64_import(self, source: str) -> None:
        self._add_fixed_import(["toUint8Array", "fromUint8Array"], source)

    def update_import(self, type_name: str, source: str) -> None:
        names = self._imports.named.setdefault(source, [])
        if type_name not in names:
            names.append(type_name)

    def get_import(self, source: str) -> Ident:
        return Ident("imp_0")

    def wrap_if_needed(self, modules: list) -> list:
        if not self.options.namespaces or not self.namespace:
            return modules
        return [wrap(self.namespace[-1], modules)]

    def normalize_type_name(self, name: str) -> str:
        name = name.removeprefix(".")
        if not self.options.with_namespace:
            return name.rpartition(".")[2]
        return name.replace(".", "_")

    def normalize_name(self, name: str) -> str:
        parts = list(self.namespace) if self.options.with_namespace else []
        parts.append(name)
        return "_".join(parts).replace(".", "_")

    def find_type_provider(self, type_name: str) -> Optional[str]:
        return self._registry.types.get(type_name)

    def lazy_type_ref(self, type_name: str) -> Ident:
        """Identifier for a fully qualified type, recording an import if needed."""
        provided_by = self.find_type_provider(type_name)
        if provided_by is None:
            raise TypeResolutionError(f"no proto provides {type_name}")
        if not type_name.startswith("."):
            raise ValueError(f"expected type {type_name!r} to have leading dot")

        if self.name == provided_by:
            if not self.options.with_namespace and "." in type_name:
                return Ident(type_name.rpartition(".")[2])
            return Ident(type_name[1:].replace(".", "_"))

        import_from = resolve_relative(provided_by, self.name)
        if not import_from.endswith(".proto"):
            raise ValueError(f"expected path {import_from!r} to have .proto suffix")
        import_from = import_from.removesuffix(".proto") + self.options.import_suffix

        name = self.normalize_type_name(type_name[1:])
        self.update_import(name, import_from)
        return Ident(name)

    def calculate_type_name(self, type_name: str) -> str:
        if self.namespace:
            return f".{'.'.join(self.namespace)}.{type_name}"
        return f".{type_name}"

    def register_type_name(self, type_name: str) -> None:
        self._registry.types[self.calculate_type_name(type_name)] = self.name

    def register_map_type(self, descriptor: Any) -> None:
        self._registry.map_types[self.calculate_type_name(descriptor.name)] = descriptor

    def get_map_type(self, type_name: str) -> Optional[Any]:
        return self._registry.map_types.get(type_name)

    def register_leading_enum_member(self, descriptor: Any) -> None:
        if not descriptor.value:
            raise ValueError(f"enum {descriptor.name} has no values")
        key = self.calculate_type_name(descriptor.name)
        self._registry.leading_enum_members[key] = descriptor.value[0].number

    def get_leading_enum_member(self, type_name: str) -> int:
        try:
            return self._registry.leading_enum_members[type_name]
        except KeyError:
            raise TypeResolutionError(f"no proto provides enum {type_name}") from None