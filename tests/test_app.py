"""
Unit tests for the HyperledgerFabricStack application stack.
"""

import json
from pathlib import Path

import aws_cdk as cdk
import pytest
from aws_cdk import Aspects, assertions
from cdk_nag import AwsSolutionsChecks

import app as app_module
from app import HyperledgerFabricStack, create_app
from hyperledger_fabric_network import InvalidPropertyError, NetworkEdition


class TestHyperledgerFabricStack:
    """Test suite for the deployable stack."""

    def setup_method(self):
        """Set up test fixtures before each test method"""
        self.env = cdk.Environment(account="123456789012", region="us-east-1")

    def test_stack_with_default_context(self) -> None:
        app = cdk.App()
        stack = HyperledgerFabricStack(app, "TestStack", env=self.env)
        template = assertions.Template.from_stack(stack)

        template.has_resource_properties("AWS::ManagedBlockchain::Member", {
            "NetworkConfiguration": {"Name": "HyperledgerFabricNetwork"},
            "MemberConfiguration": {"Name": "FoundingMember"},
        })

    def test_stack_reads_context(self) -> None:
        app = cdk.App(context={
            "network_name": "SupplyChain",
            "member_name": "OrganizationA",
            "network_edition": "STARTER",
            "threshold_percentage": 66,
            "enable_ca_logging": False,
        })
        stack = HyperledgerFabricStack(app, "TestStack", env=self.env)
        template = assertions.Template.from_stack(stack)

        template.has_resource_properties("AWS::ManagedBlockchain::Member", {
            "NetworkConfiguration": {
                "Name": "SupplyChain",
                "NetworkFrameworkConfiguration": {
                    "NetworkFabricConfiguration": {"Edition": "STARTER"},
                },
                "VotingPolicy": {
                    "ApprovalThresholdPolicy": {"ThresholdPercentage": 66},
                },
            },
            "MemberConfiguration": {"Name": "OrganizationA"},
        })
        assert stack.network.network_edition is NetworkEdition.STARTER
        assert stack.network.enable_ca_logging is False

    def test_stack_outputs(self) -> None:
        app = cdk.App()
        stack = HyperledgerFabricStack(app, "TestStack", env=self.env)
        template = assertions.Template.from_stack(stack)

        for output in (
            "NetworkId",
            "MemberId",
            "OrdererEndpoint",
            "CaEndpoint",
            "VpcEndpointServiceName",
            "AdminPasswordSecretArn",
            "AdminPrivateKeySecretArn",
            "AdminSignedCertSecretArn",
            "ClientVpcId",
        ):
            template.has_output(output, {})

    def test_invalid_context_fails(self) -> None:
        app = cdk.App(context={"member_name": "1-invalid"})

        with pytest.raises(InvalidPropertyError):
            HyperledgerFabricStack(app, "TestStack", env=self.env)

    def test_string_context_is_parsed(self) -> None:
        """Context passed with `cdk deploy -c` arrives as strings."""
        app = cdk.App(context={
            "proposal_duration_in_hours": "12",
            "threshold_percentage": "75",
            "enable_ca_logging": "false",
        })
        stack = HyperledgerFabricStack(app, "TestStack", env=self.env)
        template = assertions.Template.from_stack(stack)

        template.has_resource_properties("AWS::ManagedBlockchain::Member", {
            "NetworkConfiguration": {
                "VotingPolicy": {
                    "ApprovalThresholdPolicy": {
                        "ProposalDurationInHours": 12,
                        "ThresholdPercentage": 75,
                    },
                },
            },
        })
        assert stack.network.proposal_duration_in_hours == 12
        assert stack.network.threshold_percentage == 75
        assert stack.network.enable_ca_logging is False

    @pytest.mark.parametrize(
        "context",
        [
            {"proposal_duration_in_hours": "twelve"},
            {"threshold_percentage": "1.5"},
            {"enable_ca_logging": "maybe"},
        ],
    )
    def test_invalid_string_context_fails(self, context) -> None:
        app = cdk.App(context=context)

        with pytest.raises(InvalidPropertyError):
            HyperledgerFabricStack(app, "TestStack", env=self.env)


class TestCreateApp:
    """Test suite for the app entry point."""

    @staticmethod
    def nag_checks(app: cdk.App) -> list:
        return [aspect for aspect in Aspects.of(app).all if isinstance(aspect, AwsSolutionsChecks)]

    def test_cdk_nag_applied_by_default(self) -> None:
        app = create_app({"region": "us-east-1"})

        assert len(self.nag_checks(app)) == 1

    @pytest.mark.parametrize("enable_cdk_nag", [False, "false"])
    def test_cdk_nag_disabled(self, enable_cdk_nag) -> None:
        app = create_app({"region": "us-east-1", "enable_cdk_nag": enable_cdk_nag})

        assert self.nag_checks(app) == []

    def test_invalid_configuration_exits(self, monkeypatch) -> None:
        invalid_context = {"region": "us-east-1", "member_name": "1-invalid"}
        monkeypatch.setattr(app_module, "create_app", lambda: create_app(invalid_context))

        with pytest.raises(SystemExit) as excinfo:
            app_module.main()
        assert excinfo.value.code == 1

    def test_unsupported_region_exits(self, monkeypatch) -> None:
        monkeypatch.setattr(app_module, "create_app", lambda: create_app({"region": "us-west-1"}))

        with pytest.raises(SystemExit) as excinfo:
            app_module.main()
        assert excinfo.value.code == 1


def test_cdk_json_declares_context_keys() -> None:
    cdk_json = json.loads((Path(__file__).parent.parent / "cdk.json").read_text())
    context = cdk_json["context"]

    for key in (
        "network_name",
        "member_name",
        "network_edition",
        "framework_version",
        "proposal_duration_in_hours",
        "threshold_percentage",
        "threshold_comparator",
        "enable_ca_logging",
        "client_vpc_id",
        "enable_cdk_nag",
        "log_level",
    ):
        assert key in context
    assert context["client_vpc_id"] is None
