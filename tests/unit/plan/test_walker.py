from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import pytest

from hclplan.exceptions import ModuleCycleError, ModuleDepthError
from hclplan.hcl.blocks import Block, Module
from hclplan.plan.walker import ModuleTreeWalker, TranslationContext


def _resource(
    type_: str, name: str, attrs: list[dict[str, Any]] | None = None, **kw: Any
) -> dict:
    return {
        "kind": "resource",
        "labels": [type_, name],
        "attributes": attrs or [],
        **kw,
    }


def _provider(name: str, **attrs: Any) -> dict:
    return {
        "kind": "provider",
        "labels": [name],
        "attributes": [{"name": k, "value": v} for k, v in attrs.items()],
    }


# -------- Concrete fakes for testing --------


@dataclass
class FakeModule:
    """Hand-built module whose children can point back at ancestors."""

    name: str
    source: str = ""
    blocks: list[Block] = field(default_factory=list)
    modules: list[FakeModule] = field(default_factory=list)

    @property
    def call_name(self) -> str:
        return self.name.split(".")[-1]


# ------------------------- Tests -------------------------


class TestWalk:
    def test_single_root_resource(self) -> None:
        root = Module.model_validate(
            {
                "blocks": [
                    _resource(
                        "aws_instance",
                        "foo",
                        [{"name": "ami", "value": None, "references": ["var.ami_id"]}],
                    )
                ]
            }
        )

        doc = ModuleTreeWalker().walk(root)

        assert doc.resource_changes[0].address == "aws_instance.foo"
        assert doc.resource_changes[0].change.actions == ["create"]
        assert doc.configuration.root_module.resources[0].expressions == {
            "ami": {"references": ["var.ami_id"]}
        }
        assert doc.planned_values.root_module.address is None

    def test_providers_registered_before_resources(self) -> None:
        root = Module.model_validate(
            {
                "blocks": [
                    _resource("aws_instance", "web"),
                    _provider("aws", region="us-east-1"),
                ]
            }
        )

        doc = ModuleTreeWalker().walk(root)

        assert doc.configuration.root_module.resources[0].provider_config_key == "aws"
        assert doc.configuration.provider_config["aws"].expressions == {
            "region": {"constant_value": "us-east-1"}
        }

    def test_config_deduplicated_first_wins(self) -> None:
        root = Module.model_validate(
            {
                "blocks": [
                    _resource(
                        "aws_instance", "web", [{"name": "count", "value": 2}], index=0
                    ),
                    _resource(
                        "aws_instance",
                        "web",
                        [
                            {"name": "count", "value": 2},
                            {"name": "tag", "value": "x", "references": ["local.t"]},
                        ],
                        index=1,
                    ),
                ]
            }
        )

        doc = ModuleTreeWalker().walk(root)

        assert [c.address for c in doc.resource_changes] == [
            "aws_instance.web[0]",
            "aws_instance.web[1]",
        ]
        assert len(doc.planned_values.root_module.resources) == 2
        configs = doc.configuration.root_module.resources
        assert len(configs) == 1
        assert configs[0].address == "aws_instance.web"
        assert configs[0].expressions == {}

    def test_child_modules_attached(self) -> None:
        root = Module.model_validate(
            {
                "blocks": [_resource("aws_instance", "app")],
                "modules": [
                    {
                        "name": "module.network",
                        "source": "./modules/network",
                        "blocks": [_resource("aws_vpc", "main")],
                    }
                ],
            }
        )

        doc = ModuleTreeWalker().walk(root)

        call = doc.configuration.root_module.module_calls["network"]
        assert call.source == "./modules/network"
        assert [r.address for r in call.module.resources] == ["aws_vpc.main"]

        child = doc.planned_values.root_module.child_modules[0]
        assert child.address == "module.network"
        assert child.resources[0].address == "module.network.aws_vpc.main"

    def test_changes_follow_pre_order(self) -> None:
        root = Module.model_validate(
            {
                "blocks": [_resource("a_x", "one")],
                "modules": [
                    {
                        "name": "module.m1",
                        "blocks": [_resource("a_x", "two")],
                        "modules": [
                            {
                                "name": "module.m1.module.m2",
                                "blocks": [_resource("a_x", "three")],
                            }
                        ],
                    },
                    {"name": "module.m3", "blocks": [_resource("a_x", "four")]},
                ],
            }
        )

        doc = ModuleTreeWalker().walk(root)

        assert [c.address for c in doc.resource_changes] == [
            "a_x.one",
            "module.m1.a_x.two",
            "module.m1.module.m2.a_x.three",
            "module.m3.a_x.four",
        ]
        nested = doc.configuration.root_module.module_calls["m1"].module
        assert list(nested.module_calls) == ["m2"]

    def test_first_provider_is_process_wide_default(self) -> None:
        root = Module.model_validate(
            {
                "blocks": [
                    _provider("google"),
                    _provider("aws"),
                    _resource("aws_instance", "web"),
                ],
                "modules": [{"name": "module.net", "blocks": [_provider("azurerm")]}],
            }
        )

        doc = ModuleTreeWalker().walk(root)

        # an aws resource without an explicit provider gets the first one seen
        assert doc.configuration.root_module.resources[0].provider_config_key == "google"
        assert list(doc.configuration.provider_config) == ["google", "aws", "azurerm"]

    def test_context_not_shared_between_walks(self) -> None:
        walker = ModuleTreeWalker()
        first = Module.model_validate({"blocks": [_provider("google")]})
        second = Module.model_validate({"blocks": [_resource("aws_instance", "web")]})

        walker.walk(first)
        doc = walker.walk(second)

        assert doc.configuration.root_module.resources[0].provider_config_key == ""
        assert doc.configuration.provider_config == {}

    def test_explicit_context_is_used(self) -> None:
        context = TranslationContext()
        root = Module.model_validate({"blocks": [_provider("aws")]})

        doc = ModuleTreeWalker().walk(root, context)

        assert doc is context.document
        assert context.providers.default_key == "aws"
        assert context.module_path == []


class TestWalkerSafety:
    def test_cycle_detected(self) -> None:
        root = FakeModule(name="")
        child = FakeModule(name="module.loop")
        child.modules.append(child)
        root.modules.append(child)

        with pytest.raises(ModuleCycleError, match="module cycle detected") as exc_info:
            ModuleTreeWalker().walk(root)

        assert exc_info.value.context["module_path"] == (
            "<root> -> module.loop -> module.loop"
        )

    def test_shared_module_twice_is_not_a_cycle(self) -> None:
        shared = FakeModule(
            name="module.shared",
            blocks=[Block.model_validate(_resource("a_x", "one"))],
        )
        root = FakeModule(name="", modules=[shared, shared])

        doc = ModuleTreeWalker().walk(root)

        assert len(doc.resource_changes) == 2
        assert list(doc.configuration.root_module.module_calls) == ["shared"]

    def test_depth_limit(self) -> None:
        root = FakeModule(name="")
        node = root
        for i in range(5):
            child = FakeModule(name=f"module.m{i}")
            node.modules.append(child)
            node = child

        with pytest.raises(ModuleDepthError):
            ModuleTreeWalker(max_depth=3).walk(root)

        # exactly at the limit is fine
        ModuleTreeWalker(max_depth=5).walk(root)
