import pytest
import yaml

from clabcore.node_definition import NodeDefinition
from clabcore.types import ConfigDispatcher, Extras


SAMPLE = """
kind: srl
group: grp1
type: type1
startup-config: test_data/config.cfg
startup-delay: 5
enforce-startup-config: true
image: image:latest
license: test_data/lic1.key
cmd: runit
exec:
  - bash test1.sh
  - bash test2.sh
binds:
  - a:b
  - c:d
ports:
  - 80:8080
env:
  env1: v1
labels:
  label1: v1
network-mode: host
cpu: 1
cpu-set: 0-1
memory: 1G
config:
  vars:
    x: 1
extras:
  srl-agents:
    - agent.yml
  mysocket-proxy: proxy
"""


def test_from_dict_parses_yaml_keys():
    nd = NodeDefinition.from_dict(yaml.safe_load(SAMPLE))
    assert nd.kind == "srl"
    assert nd.startup_config == "test_data/config.cfg"
    assert nd.startup_delay == 5
    assert nd.enforce_startup_config is True
    assert nd.exec == ["bash test1.sh", "bash test2.sh"]
    assert nd.binds == ["a:b", "c:d"]
    assert nd.env == {"env1": "v1"}
    assert nd.labels == {"label1": "v1"}
    assert nd.network_mode == "host"
    assert nd.cpu == 1.0
    assert nd.cpu_set == "0-1"
    assert nd.memory == "1G"
    assert nd.config == ConfigDispatcher(vars={"x": 1})
    assert nd.extras == Extras(srl_agents=["agent.yml"], mysocket_proxy="proxy")


def test_from_dict_none_gives_defaults():
    assert NodeDefinition.from_dict(None) == NodeDefinition()


def test_from_dict_ignores_unknown_keys():
    nd = NodeDefinition.from_dict({"kind": "linux", "unknown": 1})
    assert nd == NodeDefinition(kind="linux")


def test_from_dict_rejects_bad_list():
    with pytest.raises(TypeError):
        NodeDefinition.from_dict({"binds": "a:b"})


def test_from_dict_rejects_negative_delay():
    with pytest.raises(ValueError):
        NodeDefinition.from_dict({"startup-delay": -1})


def test_from_dict_rejects_non_mapping():
    with pytest.raises(TypeError):
        NodeDefinition.from_dict(["kind"])


def test_import_envs_when_enabled(monkeypatch):
    monkeypatch.setenv("CLAB_TEST_VAR", "hello")
    monkeypatch.setenv("CLAB_KEEP_VAR", "fromshell")
    nd = NodeDefinition(env={"__IMPORT_ENVS": "true", "CLAB_KEEP_VAR": "mine"})
    nd.import_envs()
    assert nd.env["CLAB_TEST_VAR"] == "hello"
    assert nd.env["CLAB_KEEP_VAR"] == "mine"


def test_import_envs_when_disabled(monkeypatch):
    monkeypatch.setenv("CLAB_TEST_VAR", "hello")
    nd = NodeDefinition(env={"__IMPORT_ENVS": "false"})
    nd.import_envs()
    assert nd.env == {"__IMPORT_ENVS": "false"}


def test_import_envs_empty_env(monkeypatch):
    monkeypatch.setenv("CLAB_TEST_VAR", "hello")
    nd = NodeDefinition()
    nd.import_envs()
    assert nd.env == {}