from __future__ import annotations

import pydantic
import pytest

from hclplan.hcl.blocks import (
    Attribute,
    Block,
    BlockKind,
    Module,
    Reference,
    ReferenceKind,
)


class TestBlockKind:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("resource", BlockKind.RESOURCE),
            ("module", BlockKind.MODULE),
            ("provider", BlockKind.PROVIDER),
            ("dynamic", BlockKind.DYNAMIC),
            ("depends_on", BlockKind.DEPENDS_ON),
            ("ebs_block_device", BlockKind.NESTED),
            ("", BlockKind.NESTED),
        ],
    )
    def test_classify(self, raw: str, expected: BlockKind) -> None:
        assert BlockKind.classify(raw) is expected

    def test_meta_kinds(self) -> None:
        assert BlockKind.DYNAMIC.is_meta
        assert BlockKind.DEPENDS_ON.is_meta
        assert not BlockKind.RESOURCE.is_meta
        assert not BlockKind.NESTED.is_meta


class TestReference:
    def test_variable_both_spellings(self) -> None:
        short = Reference.parse("var.ami_id")
        long = Reference.parse("variable.ami_id")

        assert short == long
        assert short.kind is ReferenceKind.VARIABLE
        assert str(short) == "variable.ami_id"
        assert short.json_string() == "var.ami_id"

    def test_resource_reference_keeps_full_text(self) -> None:
        ref = Reference.parse("aws_vpc.main.id")

        assert ref.kind is ReferenceKind.RESOURCE
        assert str(ref) == "aws_vpc.main.id"
        assert ref.json_string() == "aws_vpc.main.id"

    @pytest.mark.parametrize(
        "text, kind",
        [
            ("local.tags", ReferenceKind.LOCAL),
            ("data.aws_ami.ubuntu.id", ReferenceKind.DATA),
            ("module.network.vpc_id", ReferenceKind.MODULE),
        ],
    )
    def test_prefixed_kinds_round_trip_text(
        self, text: str, kind: ReferenceKind
    ) -> None:
        ref = Reference.parse(text)
        assert ref.kind is kind
        assert str(ref) == text

    def test_context_reference(self) -> None:
        ref = Reference.parse("count.index")
        assert ref.kind is ReferenceKind.CONTEXT
        assert str(ref) == "count.index"

    def test_empty_label_rejected(self) -> None:
        with pytest.raises(pydantic.ValidationError):
            Reference(kind=ReferenceKind.VARIABLE, label="")


class TestAttribute:
    def test_all_references_deduplicates_in_order(self) -> None:
        attr = Attribute.model_validate(
            {
                "name": "count",
                "value": None,
                "references": ["var.enabled", "local.n", "variable.enabled"],
            }
        )

        assert [str(r) for r in attr.all_references()] == [
            "variable.enabled",
            "local.n",
        ]


class TestBlock:
    def test_root_resource_addresses(self) -> None:
        block = Block(kind="resource", labels=["aws_instance", "web"], index=2)

        assert block.type_label == "aws_instance"
        assert block.name_label == "web[2]"
        assert block.local_address == "aws_instance.web[2]"
        assert block.full_address == "aws_instance.web[2]"
        assert block.repetition_index == 2
        assert block.is_inside_non_root_module is False
        assert block.module_name == ""

    def test_index_zero_is_kept(self) -> None:
        block = Block(kind="resource", labels=["aws_instance", "web"], index=0)
        assert block.repetition_index == 0
        assert block.full_address == "aws_instance.web[0]"

    def test_negative_index_rejected(self) -> None:
        with pytest.raises(pydantic.ValidationError):
            Block(kind="resource", labels=["aws_instance", "web"], index=-1)

    def test_nested_module_addresses(self) -> None:
        block = Block(
            kind="resource",
            labels=["aws_subnet", "private"],
            module_address="module.network.module.subnets",
        )

        assert block.local_address == "aws_subnet.private"
        assert (
            block.full_address
            == "module.network.module.subnets.aws_subnet.private"
        )
        assert block.module_name == "network.subnets"
        assert block.is_inside_non_root_module is True

    def test_provider_local_address(self) -> None:
        block = Block(kind="provider", labels=["aws"])
        assert block.local_address == "provider.aws"

    def test_provider_name_inferred_from_type(self) -> None:
        block = Block(kind="resource", labels=["google_compute_instance", "vm"])
        assert block.explicit_provider_label == ""
        assert block.provider_name == "google"

    def test_provider_name_from_reference(self) -> None:
        block = Block.model_validate(
            {
                "kind": "resource",
                "labels": ["aws_instance", "web"],
                "attributes": [
                    {"name": "provider", "value": None, "references": ["aws.west"]}
                ],
            }
        )
        assert block.explicit_provider_label == "aws.west"
        assert block.provider_name == "aws.west"

    def test_values_and_get_attribute(self) -> None:
        block = Block(
            kind="resource",
            labels=["aws_instance", "web"],
            attributes=[
                Attribute(name="ami", value="ami-123"),
                Attribute(name="count", value=2),
            ],
        )

        assert block.values() == {"ami": "ami-123", "count": 2}
        assert block.get_attribute("ami").value == "ami-123"
        assert block.get_attribute("missing") is None


class TestModule:
    def test_module_name_propagates_to_blocks(self) -> None:
        module = Module.model_validate(
            {
                "name": "module.network",
                "source": "./network",
                "blocks": [
                    {
                        "kind": "resource",
                        "labels": ["aws_vpc", "main"],
                        "children": [{"kind": "tags"}],
                    }
                ],
            }
        )

        block = module.blocks[0]
        assert block.module_address == "module.network"
        assert block.children[0].module_address == "module.network"
        assert module.call_name == "network"

    def test_explicit_module_address_not_overwritten(self) -> None:
        module = Module.model_validate(
            {
                "name": "module.a",
                "blocks": [
                    {
                        "kind": "resource",
                        "labels": ["aws_vpc", "main"],
                        "module_address": "module.a.module.b",
                    }
                ],
            }
        )
        assert module.blocks[0].module_address == "module.a.module.b"

    def test_root_module_leaves_blocks_at_root(self) -> None:
        module = Module.model_validate(
            {"blocks": [{"kind": "resource", "labels": ["aws_vpc", "main"]}]}
        )
        assert module.blocks[0].module_address == ""

    def test_unknown_fields_rejected(self) -> None:
        with pytest.raises(pydantic.ValidationError):
            Module.model_validate({"name": "", "unexpected": True})
