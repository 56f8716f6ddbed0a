import pytest

from platformctl.modules.capacity import (
    DEFAULT_MAX_PODS,
    ENI_MAX_PODS,
    CapacityTable,
    effective_max_pods,
    max_pods,
)


def test_known_instance_types_return_tabulated_value():
    for instance_type, expected in ENI_MAX_PODS.items():
        assert max_pods(instance_type, default=-1) == expected


@pytest.mark.parametrize("instance_type", ["x1e.xlarge", "", "C5.LARGE", "c5.large ", "c5"])
def test_unknown_instance_types_return_default(instance_type):
    assert max_pods(instance_type, default=42) == 42


def test_default_is_seventeen():
    assert DEFAULT_MAX_PODS == 17
    assert max_pods("p4d.24xlarge") == 17


def test_effective_capacity_is_minimum():
    assert effective_max_pods(["c5.large", "m5.xlarge"]) == 29
    assert effective_max_pods(["m5.xlarge", "c5.large"]) == 29


def test_effective_capacity_uses_default_for_unknown_members():
    assert effective_max_pods(["m5.4xlarge", "unknown.type"], default=10) == 10


def test_effective_capacity_requires_instance_types():
    with pytest.raises(ValueError):
        effective_max_pods([])


def test_table_is_read_only():
    with pytest.raises(TypeError):
        ENI_MAX_PODS["c5.large"] = 1


def test_injected_table():
    table = CapacityTable({"tiny.box": 3})
    assert "tiny.box" in table
    assert "c5.large" not in table
    assert len(table) == 1
    assert table.max_pods("tiny.box") == 3
    assert table.max_pods("c5.large", default=9) == 9
