[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "protoc_gen_arkts"
version = "0.0.1"
description = "A protoc plugin that generates ArkTS message classes from protobuf descriptors"
requires-python = ">=3.10"
keywords = ["protobuf", "protoc", "plugin", "arkts", "codegen"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Code Generators",
]
dependencies = [
    "protobuf",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
protoc-gen-arkts = "protoc_gen_arkts.generator:main"

[tool.hatch.build.targets.wheel]
packages = ["protoc_gen_arkts"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
