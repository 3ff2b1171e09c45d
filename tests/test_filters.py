import pytest

from clabcore.filters import InvalidBindError, convert_mounts, podman_filter_map
from clabcore.types import GenericFilter, filters_from_label_strings


def test_equal_label_filter():
    result = podman_filter_map(
        [GenericFilter(filter_type="label", field="containerlab", operator="=", match="lab1")]
    )
    assert result == {"label": ["containerlab=lab1"]}


def test_exists_filter_has_empty_value():
    result = podman_filter_map(
        [GenericFilter(filter_type="label", field="containerlab", operator="exists", match="x")]
    )
    assert result == {"label": ["containerlab="]}


def test_unsupported_operator_is_skipped():
    result = podman_filter_map(
        [
            GenericFilter(filter_type="label", field="a", operator="!=", match="b"),
            GenericFilter(filter_type="label", field="c", operator="=", match="d"),
        ]
    )
    assert result == {"label": ["c=d"]}


def test_filters_grouped_by_type_in_order():
    result = podman_filter_map(
        [
            GenericFilter(filter_type="label", field="a", operator="=", match="1"),
            GenericFilter(filter_type="name", field="n", operator="=", match="x"),
            GenericFilter(filter_type="label", field="b", operator="exists"),
        ]
    )
    assert result == {"label": ["a=1", "b="], "name": ["n=x"]}


def test_empty_filters():
    assert podman_filter_map([]) == {}
    assert podman_filter_map(None) == {}


def test_filters_from_label_strings_round_trip():
    result = podman_filter_map(filters_from_label_strings(["lab = mylab", "containerlab"]))
    assert result == {"label": ["lab=mylab", "containerlab="]}


def test_convert_simple_bind():
    assert convert_mounts(["/src:/dst"]) == [
        {"source": "/src", "destination": "/dst", "type": "bind", "options": []}
    ]


def test_convert_bind_with_options():
    result = convert_mounts(["/src:/dst:ro,z"])
    assert result[0]["options"] == ["ro", "z"]
    assert result[0]["source"] == "/src"
    assert result[0]["destination"] == "/dst"


def test_extra_colons_stay_in_options():
    result = convert_mounts(["a:b:c:d"])
    assert result[0]["options"] == ["c:d"]


def test_mounts_keep_order_and_count():
    binds = ["a:b", "c:d", "e:f:rw"]
    result = convert_mounts(binds)
    assert [m["source"] for m in result] == ["a", "c", "e"]
    assert all(m["type"] == "bind" for m in result)


def test_no_mounts():
    assert convert_mounts([]) == []
    assert convert_mounts(None) == []


def test_bind_without_destination_raises():
    with pytest.raises(InvalidBindError, match="invalid bind mount provided: /only"):
        convert_mounts(["a:b", "/only"])


def test_invalid_bind_is_value_error():
    with pytest.raises(ValueError):
        convert_mounts(["nocolon"])