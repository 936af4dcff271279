"""Binary serialization runtime backed by the protobuf JavaScript reader and writer."""

from __future__ import annotations

from dataclasses import dataclass

from .context import Context
from .deserialize import deserialize_setup
from .field import this_field_member
from .serialize import serialize_fields


@dataclass(frozen=True)
class GooglePBRuntime:
    """Produces the bodies of ``mergeFrom`` and ``toBinary``."""

    def from_binary(self, ctx: Context, descriptor) -> list:
        """Statements that read every field of ``descriptor`` from ``bytes``."""
        return deserialize_setup(ctx, descriptor, True)

    def to_binary(self, ctx: Context, descriptor) -> list:
        """Statements that write every non-default field into ``bw``."""
        return serialize_fields(ctx, descriptor, this_field_member, True, True)