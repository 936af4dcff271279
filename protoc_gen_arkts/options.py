"""Plugin options passed as ``key=value`` pairs separated by commas."""

from __future__ import annotations

import sys
from dataclasses import dataclass

_STRING_OPTIONS = (
    "grpc_web_package",
    "grpc_server_package",
    "runtime_package",
    "base64_package",
    "import_suffix",
)
_BOOL_OPTIONS = ("unary_rpc_promise", "namespaces", "with_namespace", "with_sendable")


@dataclass
class Options:
    """Settings that control the generated code."""

    unary_rpc_promise: bool = False
    grpc_server_package: str = "@grpc/grpc-js"
    grpc_web_package: str = "grpc-web"
    runtime_package: str = "google-protobuf"
    base64_package: str = "js-base64"
    sendable_package: str = "@kit.ArkTS"
    namespaces: bool = False
    import_suffix: str = ""
    with_namespace: bool = True
    with_sendable: bool = False

    @classmethod
    def parse(cls, raw: str) -> "Options":
        """Parse the parameter string; later keys override earlier ones."""
        settings: dict[str, object] = {}
        for part in raw.split(","):
            key, *rest = part.strip().split("=")
            value = rest[0] if rest else None

            if key in _STRING_OPTIONS or key in _BOOL_OPTIONS:
                if value is None:
                    raise ValueError(f"expected a value for {key}")
                settings[key] = value if key in _STRING_OPTIONS else value == "true"
            elif key == "sendable_package":
                continue
            elif key == "no_namespace":
                print(
                    "DEPRECATED: no_namespace option is deprecated. "
                    "use namespaces=false instead",
                    file=sys.stderr,
                )
                settings["namespaces"] = False
            else:
                print(f"WARNING: unknown option {key}", file=sys.stderr)

        return cls(**settings)