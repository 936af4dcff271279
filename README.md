# protoc_gen_arkts

A `protoc` plugin that turns `.proto` files into ArkTS (`.ets`) sources.

Every message becomes an exported class. Each class has typed fields, binary
`toBinary` / `fromBinary` / `mergeFrom` methods built on the `google-protobuf`
`BinaryReader` and `BinaryWriter`, and `toJson` / `fromJson` methods. Enums
become exported enums. Services become exported classes.

## Installation

```sh
pip install .
```

Installing the package puts the `protoc-gen-arkts` command on your `PATH`.

## Usage

`protoc` finds the plugin by its name:

```sh
protoc --arkts_out=./generated --arkts_opt=with_namespace=false path/to/file.proto
```

The plugin reads a `CodeGeneratorRequest` from standard input and writes a
`CodeGeneratorResponse` to standard output. It emits one `.ets` file for each
requested `.proto` file, and skips `descriptor.proto`.

### Options

Pass options as a comma-separated list of `key=value` pairs through
`--arkts_opt`:

| Option                 | Default          | Meaning                                                   |
|------------------------|------------------|-----------------------------------------------------------|
| `runtime_package`      | `google-protobuf`| Module that `BinaryReader` and `BinaryWriter` come from   |
| `base64_package`       | `js-base64`      | Module that provides `toUint8Array` / `fromUint8Array`    |
| `grpc_web_package`     | `grpc-web`       | grpc-web module                                           |
| `grpc_server_package`  | `@grpc/grpc-js`  | gRPC server module                                        |
| `unary_rpc_promise`    | `false`          | Return promises from unary calls                          |
| `namespaces`           | `false`          | Wrap nested declarations in namespaces                    |
| `import_suffix`        | *(empty)*        | Suffix appended to relative import paths                  |
| `with_namespace`       | `true`           | Prefix type names with their package (`pkg_Message`)     |
| `with_sendable`        | `false`          | Emit `@Sendable` classes and `collections` containers     |

The plugin prints a warning for any option it does not know and otherwise
ignores it.

## Library use

You can also drive the generator from Python:

```python
from protoc_gen_arkts.generator import compile_request
from protoc_gen_arkts.options import Options

response_bytes = compile_request(request_bytes)   # serialized CodeGeneratorResponse
options = Options.parse("with_sendable=true,import_suffix=.ets")
```