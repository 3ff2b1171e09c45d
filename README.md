# clabcore

Building blocks for describing and preparing container-based network labs:
a topology model with defaults/kind/node inheritance, node and link types,
container image name handling, registry credentials from the docker client
configuration, port mapping parsing, podman-style filters and bind mounts,
and a registry of container runtimes.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Topologies (`clabcore.topology`)

A topology has three levels of node settings: `defaults`, `kinds` and
`nodes`. A node's effective value comes from the node itself, then its
kind, then the defaults.

```python
from clabcore.topology import Topology

topo = Topology.from_yaml("""
defaults:
  user: user1
kinds:
  srl:
    image: image:latest
    env:
      env1: v1
nodes:
  node1:
    kind: srl
    env:
      env2: v2
""")

topo.node_kind("node1")    # "srl"
topo.node_image("node1")   # "image:latest"
topo.node_user("node1")    # "user1"
topo.node_env("node1")     # {"env1": "v1", "env2": "v2"}
```

- `env` and `labels` are merged across the three levels (`None` when the
  result is empty); `config` variables are merged recursively into a
  `ConfigDispatcher`; `exec` lists are concatenated defaults, kind, node.
- `node_startup_config()` and `node_license()` return the path resolved with
  `resolve_path()` (a leading `~` is expanded, other paths made absolute) and
  raise `OSError` if the file does not exist.
- `import_envs()` copies the process environment into each definition whose
  `env` has `__IMPORT_ENVS: "true"`, keeping values already set.

Node definitions themselves live in `clabcore.node_definition.NodeDefinition`,
built from a parsed mapping with `NodeDefinition.from_dict()`; malformed values
raise `TypeError` or `ValueError`.

## Lab types (`clabcore.types`)

Dataclasses `MgmtNet`, `NodeConfig`, `Endpoint`, `Link`, `GenericContainer`,
`GenericMgmtIPs`, `GenericFilter`, `ConfigDispatcher` and `Extras`.
`filters_from_label_strings(["a=b", "c"])` turns label strings into `=` and
`exists` label filters. `str(link)` gives `link [node1:e1, node2:e2]`.

## Merging maps (`clabcore.maps`)

```python
from clabcore.maps import convert_envs, merge_maps, merge_string_maps

merge_maps({"r": {"a": "1"}}, {"r": {"b": "2"}})
# {"r": {"a": "1", "b": "2"}}
merge_string_maps({"a": "1"}, {"a": "11", "b": "2"})
# {"a": "11", "b": "2"}
convert_envs({"A": "1"})
# ["A=1"]
```

## Image names and registry credentials

```python
from clabcore.images import canonical_image_name, cni_binary_path
from clabcore.auth import load_docker_config, docker_auth, image_domain_name

canonical_image_name("alpine")          # "docker.io/library/alpine:latest"
image_domain_name("example.com/x/y")    # "example.com"
cni_binary_path()                       # $CNI_BIN or "/opt/cni/bin"

config = load_docker_config("")          # reads ~/.docker/config.json
auth = docker_auth(config, canonical_image_name("example.com/repo/image"))
```

`load_docker_config()` raises `OSError` if the file cannot be read and
`ValueError` if it is not valid. `docker_auth()` returns `""` when no
credentials are stored for the image's registry.

## Port mappings (`clabcore.portmaps`)

```python
from clabcore.portmaps import parse_and_validate_range, convert_port_map, convert_expose

parse_and_validate_range("8080-8081")        # (8080, 2)
convert_port_map({"80/tcp": [("", "8080")]})  # [PortMapping(container_port=80, host_port=8080, ...)]
convert_expose({"80/tcp", "80/udp"})          # {80: "tcp,udp"} (order follows iteration)
```

Invalid port specifications raise `PortSpecError`.

## Filters and bind mounts (`clabcore.filters`)

`podman_filter_map()` groups `GenericFilter`s by type as `field=value`
strings; `convert_mounts(["/src:/dst:ro"])` turns bind strings into bind mount
dicts and raises `InvalidBindError` when the destination is missing.

## Files (`clabcore.files`)

`file_exists`, `copy_file` and `copy_file_contents` (the source may be an
http(s) URL), `create_file`, `create_directory` and `read_file_content`, with
`NonRegularFileError`, `FileNotExistError` and `HTTPFetchError`.

## Runtimes (`clabcore.runtime`)

`ContainerRuntime` is an abstract interface, with `RuntimeConfig`,
`register()` for runtime factories (kept in `CONTAINER_RUNTIMES`) and the
option helpers `with_config()`, `with_mgmt_net()` and `with_keep_mgmt_net()`.

## What this package does not do

It contains no concrete runtime: nothing here talks to a container engine,
creates networks or containers, or deploys a lab. There is no command-line
tool. Those parts are left to code that subclasses `ContainerRuntime` and
registers it.