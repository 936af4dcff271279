"""Generate ArkTS sources from protobuf descriptors as a protoc plugin."""

__version__ = "0.0.1"