import pytest

from rolegate.assertion import PolicyOp
from rolegate.model import MissingRequiredSectionsError, Model
from rolegate.role_manager import DefaultRoleManager

P_RULES = [
    ["alice", "data1", "read"],
    ["bob", "data2", "write"],
    ["data2_admin", "data2", "read"],
    ["data2_admin", "data2", "write"],
]

MODEL_TEXT = {
    "request_definition::r": "sub, obj, act",
    "policy_definition::p": "sub, obj, act",
    "role_definition::g": "_, _",
    "policy_effect::e": "some(where (p.eft == allow))",
    "matchers::m": "g(r.sub, p.sub) && r.obj == p.obj && r.act == p.act",
}


class FakeConfig:
    def __init__(self, values):
        self.values = values

    def get_string(self, key):
        return self.values.get(key, "")


def rbac_model():
    model = Model()
    model.load_model_from_config(FakeConfig(MODEL_TEXT))
    for rule in P_RULES:
        model.add_policy("p", "p", rule)
    model.add_policy("g", "g", ["alice", "data2_admin"])
    return model


def test_load_model_tokens_and_values():
    model = Model()
    model.load_model_from_config(FakeConfig(MODEL_TEXT))
    assert model.m["r"]["r"].tokens == ["r_sub", "r_obj", "r_act"]
    assert model.m["p"]["p"].tokens == ["p_sub", "p_obj", "p_act"]
    assert model.m["g"]["g"].value == "_, _"
    assert all(model.has_section(sec) for sec in "rpgem")


def test_numbered_keys_are_loaded():
    values = dict(MODEL_TEXT)
    values["policy_definition::p2"] = "sub, act"
    model = Model()
    model.load_model_from_config(FakeConfig(values))
    assert set(model.m["p"]) == {"p", "p2"}
    assert model.m["p"]["p2"].tokens == ["p2_sub", "p2_act"]


def test_missing_required_sections():
    model = Model()
    with pytest.raises(MissingRequiredSectionsError) as info:
        model.load_model_from_config(FakeConfig({"request_definition::r": "sub"}))
    assert str(info.value) == "missing required sections: policy_definition,policy_effect,matchers"


def test_add_def():
    model = Model()
    assert model.add_def("r", "r", "") is False
    assert model.has_section("r") is False
    assert model.add_def("m", "m", "r.sub == p.sub # trailing note") is True
    assert model.m["m"]["m"].value == "r.sub == p.sub"


def test_get_list():
    model = rbac_model()
    assert model.get_values_for_field_in_policy_all_types("p", 0) == ["alice", "bob", "data2_admin"]
    assert model.get_values_for_field_in_policy_all_types("p", 1) == ["data1", "data2"]
    assert model.get_values_for_field_in_policy_all_types("p", 2) == ["read", "write"]
    assert model.get_values_for_field_in_policy_all_types("g", 1) == ["data2_admin"]


def test_get_policy_api():
    model = rbac_model()
    assert model.get_policy("p", "p") == P_RULES

    cases = [
        (0, ["alice"], [["alice", "data1", "read"]]),
        (0, ["bob"], [["bob", "data2", "write"]]),
        (0, ["data2_admin"], [["data2_admin", "data2", "read"], ["data2_admin", "data2", "write"]]),
        (1, ["data1"], [["alice", "data1", "read"]]),
        (1, ["data2"], [["bob", "data2", "write"], ["data2_admin", "data2", "read"], ["data2_admin", "data2", "write"]]),
        (2, ["read"], [["alice", "data1", "read"], ["data2_admin", "data2", "read"]]),
        (2, ["write"], [["bob", "data2", "write"], ["data2_admin", "data2", "write"]]),
        (0, ["data2_admin", "data2"], [["data2_admin", "data2", "read"], ["data2_admin", "data2", "write"]]),
        (0, ["data2_admin", "", "read"], [["data2_admin", "data2", "read"]]),
        (1, ["data2", "write"], [["bob", "data2", "write"], ["data2_admin", "data2", "write"]]),
    ]
    for index, values, expected in cases:
        assert model.get_filtered_policy("p", "p", index, values) == expected

    assert model.has_policy("p", "p", ["alice", "data1", "read"]) is True
    assert model.has_policy("p", "p", ["bob", "data2", "write"]) is True
    assert model.has_policy("p", "p", ["alice", "data2", "read"]) is False
    assert model.has_policy("p", "p", ["bob", "data3", "write"]) is False

    assert model.get_policy("g", "g") == [["alice", "data2_admin"]]
    assert model.get_filtered_policy("g", "g", 0, ["alice"]) == [["alice", "data2_admin"]]
    assert model.get_filtered_policy("g", "g", 0, ["bob"]) == []
    assert model.get_filtered_policy("g", "g", 1, ["data1_admin"]) == []
    assert model.get_filtered_policy("g", "g", 1, ["data2_admin"]) == [["alice", "data2_admin"]]
    assert model.get_filtered_policy("g", "g", 0, ["", "data2_admin"]) == [["alice", "data2_admin"]]
    assert model.has_policy("g", "g", ["alice", "data2_admin"]) is True
    assert model.has_policy("g", "g", ["bob", "data2_admin"]) is False


def test_get_policy_returns_copy():
    model = rbac_model()
    model.get_policy("p", "p")[0][0] = "mallory"
    assert model.get_policy("p", "p") == P_RULES


def test_modify_policy_api():
    model = rbac_model()
    assert model.remove_policy("p", "p", ["alice", "data1", "read"]) is True
    assert model.remove_policy("p", "p", ["bob", "data2", "write"]) is True
    assert model.remove_policy("p", "p", ["alice", "data1", "read"]) is False
    assert model.add_policy("p", "p", ["eve", "data3", "read"]) is True
    assert model.add_policy("p", "p", ["eve", "data3", "read"]) is False

    rules = [
        ["jack", "data4", "read"],
        ["katy", "data4", "write"],
        ["leyo", "data4", "read"],
        ["ham", "data4", "write"],
    ]
    assert model.add_policies("p", "p", rules) is True
    assert model.add_policies("p", "p", rules) is False
    assert model.get_policy("p", "p") == [
        ["data2_admin", "data2", "read"],
        ["data2_admin", "data2", "write"],
        ["eve", "data3", "read"],
        *rules,
    ]

    assert model.remove_policies("p", "p", rules) is True
    assert model.remove_policies("p", "p", rules) is False

    named = ["eve", "data3", "read"]
    assert model.remove_policy("p", "p", named) is True
    assert model.add_policy("p", "p", named) is True
    assert model.get_policy("p", "p") == [
        ["data2_admin", "data2", "read"],
        ["data2_admin", "data2", "write"],
        ["eve", "data3", "read"],
    ]

    removed, effects = model.remove_filtered_policy("p", "p", 1, ["data2"])
    assert removed is True
    assert effects == [["data2_admin", "data2", "read"], ["data2_admin", "data2", "write"]]
    assert model.get_policy("p", "p") == [["eve", "data3", "read"]]

    assert model.update_policy("p", "p", ["eve", "data3", "read"], ["eve", "data3", "write"]) is True
    assert model.get_policy("p", "p") == [["eve", "data3", "write"]]

    model.add_policies("p", "p", rules)
    assert model.update_policies(
        "p",
        "p",
        [["eve", "data3", "write"], ["leyo", "data4", "read"], ["katy", "data4", "write"]],
        [["eve", "data3", "read"], ["leyo", "data4", "write"], ["katy", "data1", "write"]],
    ) is True
    policy = model.get_policy("p", "p")
    for rule in (["eve", "data3", "read"], ["leyo", "data4", "write"], ["katy", "data1", "write"]):
        assert rule in policy
    assert ["eve", "data3", "write"] not in policy


def test_remove_filtered_policy_no_match():
    model = rbac_model()
    assert model.remove_filtered_policy("p", "p", 0, ["nobody"]) == (False, [])
    assert model.get_policy("p", "p") == P_RULES


def test_update_policy_failures():
    model = rbac_model()
    assert model.update_policy("p", "p", ["x", "y", "z"], ["a", "b", "c"]) is False
    assert model.get_policy("p", "p") == P_RULES
    # the old rule is removed even though the new one already exists
    assert model.update_policy("p", "p", ["alice", "data1", "read"], ["bob", "data2", "write"]) is False
    assert model.get_policy("p", "p") == P_RULES[1:]


def test_update_policies_missing_old_rule():
    model = rbac_model()
    assert model.update_policies("p", "p", [["nobody", "x", "y"]], [["a", "b", "c"]]) is False
    assert model.has_policy("p", "p", ["a", "b", "c"]) is False


def test_clear_policy():
    model = rbac_model()
    model.clear_policy()
    assert model.get_policy("p", "p") == []
    assert model.get_policy("g", "g") == []


def test_modify_grouping_policy_with_role_links():
    model = rbac_model()
    rm = DefaultRoleManager(10)
    model.build_role_links(rm)
    assert rm.get_roles("alice") == ["data2_admin"]
    assert rm.get_roles("bob") == []

    model.remove_policy("g", "g", ["alice", "data2_admin"])
    model.build_incremental_role_links(rm, PolicyOp.REMOVE, "g", "g", [["alice", "data2_admin"]])
    assert rm.get_roles("alice") == []

    grouping = [["ham", "data4_admin"], ["jack", "data5_admin"]]
    assert model.add_policies("g", "g", grouping) is True
    model.build_incremental_role_links(rm, PolicyOp.ADD, "g", "g", grouping)
    assert rm.get_roles("ham") == ["data4_admin"]
    assert rm.get_roles("jack") == ["data5_admin"]
    assert rm.get_users("data4_admin") == ["ham"]


def test_incremental_links_ignore_non_grouping_section():
    model = rbac_model()
    rm = DefaultRoleManager(10)
    model.build_incremental_role_links(rm, PolicyOp.ADD, "p", "p", [["a", "b"]])
    assert rm.get_roles("a") == []


def test_values_for_field_unknown_section_is_empty():
    model = Model()
    assert model.get_values_for_field_in_policy_all_types("g", 0) == []


def test_get_policy_unknown_type_raises():
    model = rbac_model()
    with pytest.raises(KeyError):
        model.get_policy("p", "p9")