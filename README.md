# rolegate

Building blocks for role-based access control:

- `rolegate.role_manager`: `DefaultRoleManager` keeps a graph of roles and
  the links between them, optionally scoped by a domain, and answers
  "does alice inherit admin?" (`has_link`), "which roles does alice have
  directly?" (`get_roles`) and "who has admin directly?" (`get_users`).
- `rolegate.assertion`: `Assertion` holds one definition of a model section
  and builds role links from its grouping rules into a role manager.
  `PolicyOp.ADD` and `PolicyOp.REMOVE` select incremental changes.
- `rolegate.model`: `Model` holds request, policy, role, effect and matcher
  definitions together with the policy rules. It can add, remove, update
  and filter rules.
- `rolegate.adapter` and `rolegate.file_adapter`: load policy rules from a
  comma separated text file into a model and save them back.
  `FilteredFileAdapter` loads only the rules that match a `Filter`.
- `rolegate.watcher`: watcher interfaces for keeping several instances in
  step. The defaults only record changes locally.

## Installation

From a checkout of the project:

```
pip install .
```

The package has no runtime dependencies.

## Role manager

```python
from rolegate.role_manager import DefaultRoleManager

rm = DefaultRoleManager(10)          # maximum inheritance depth
rm.add_link("alice", "admin", [])
rm.add_link("admin", "reader", [])

rm.has_link("alice", "reader", [])   # True
rm.get_roles("alice", [])            # ["admin"]
rm.get_users("admin", [])            # ["alice"]

# Links inside a domain
rm.add_link("bob", "admin", ["domain1"])
rm.get_roles("bob", ["domain1"])     # ["admin"]
```

`get_roles` returns an empty list for an unknown name. `get_users` and
`delete_link` raise `RBACError` for a name the manager has never seen.
A domain list with more than one entry also raises `RBACError`.
`add_matching_func(fn)` sets a function that matches role names against
stored patterns. Call it before links are built.

## Models and policy files

A policy file holds one rule per line, with the policy type first:

```
p, alice, data1, read
p, bob, data2, write
g, alice, data2_admin
```

Empty lines and lines starting with `#` are skipped. A line whose policy
type the model does not define raises `AdapterError`.

```python
from rolegate.model import Model
from rolegate.file_adapter import FileAdapter
from rolegate.role_manager import DefaultRoleManager

model = Model()
model.add_def("r", "r", "sub, obj, act")
model.add_def("p", "p", "sub, obj, act")
model.add_def("g", "g", "_, _")
model.add_def("e", "e", "some(where (p.eft == allow))")
model.add_def("m", "m", "g(r.sub, p.sub) && r.obj == p.obj && r.act == p.act")

FileAdapter("policy.csv").load_policy(model)

model.get_filtered_policy("p", "p", 0, ["alice"])  # [["alice", "data1", "read"]]
model.has_policy("p", "p", ["bob", "data2", "write"])  # True

rm = DefaultRoleManager(10)
model.build_role_links(rm)
rm.get_roles("alice", [])                          # ["data2_admin"]
```

In filters, an empty string matches any value in that field.

Rules are changed in the model with these methods:

- `add_policy` and `add_policies`
- `remove_policy`, `remove_policies` and `remove_filtered_policy`
- `update_policy` and `update_policies`

The batch methods change nothing if any rule is already present or any rule
is missing, as the case may be. `remove_filtered_policy` returns whether
anything was removed, together with the removed rules.

Role links can be kept in step with grouping rules as they change:

```python
from rolegate.assertion import PolicyOp

model.add_policy("g", "g", ["bob", "admin"])
model.build_incremental_role_links(rm, PolicyOp.ADD, "g", "g", [["bob", "admin"]])
```

`load_model_from_config(cfg)` fills a model from any object that has a
`get_string("section::key")` method. It raises
`MissingRequiredSectionsError` when the request, policy, effect or matcher
definition is absent.

`FileAdapter.save_policy(model)` writes every `p` and `g` rule back to the
file, one `type, field, field, ...` line each. Single-rule and batch writes
raise `UnsupportedOperationError`. These are `add_policy`, `remove_policy`
and `remove_filtered_policy` on `FileAdapter`, and `add_policies` and
`remove_policies` on `BatchFileAdapter`.

## Filtered loading

```python
from rolegate.adapter import Filter
from rolegate.file_adapter import FilteredFileAdapter

adapter = FilteredFileAdapter("policy.csv")
adapter.load_filtered_policy(model, Filter(p=["alice"], g=[]))
adapter.is_filtered()  # True
```

A filtered adapter raises `AdapterError` if asked to save a policy that it
loaded only in part. Calling `load_policy` loads everything and clears the
filtered state.

## Watchers

```python
from rolegate.watcher import DefaultWatcherEx

watcher = DefaultWatcherEx()
watcher.set_update_callback(lambda: None)
watcher.update_for_add_policy(["alice", "data1", "read"])
watcher.notifications[0].kind   # "add_policy"
watcher.close()                 # later changes are no longer recorded
```

## What the package does not do

- It has no enforcer. Nothing evaluates matcher or effect expressions
  against a request. The model stores those definitions only as text.
- It does not parse model configuration files. `load_model_from_config`
  needs a configuration object from elsewhere, or call `add_def` directly.
- The file adapters support no storage other than a local text file.
- The default watchers do not talk to other processes.

## Running the tests

```
pip install -e ".[test]"
pytest
```