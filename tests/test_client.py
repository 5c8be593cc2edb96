"""
Unit tests for the HyperledgerFabricClient construct.

These tests verify the client VPC, its flow log and the two interface
endpoints, both for a new VPC and for a caller-supplied one.
"""

import json
import re

import aws_cdk as cdk
import pytest
from aws_cdk import assertions, aws_ec2 as ec2

from hyperledger_fabric_network import (
    HyperledgerFabricClientProps,
    HyperledgerFabricNetwork,
)

TOKEN_REGEXP = re.compile(r"^\$\{Token\[TOKEN\.[0-9]+\]\}$")


class TestHyperledgerFabricClient:
    """Test suite for the client network access."""

    @pytest.fixture
    def stack(self) -> cdk.Stack:
        app = cdk.App()
        return cdk.Stack(app, "TestStack", env=cdk.Environment(region="us-east-1"))

    def test_default_client_network(self, stack: cdk.Stack) -> None:
        """Test that a new isolated VPC is created when none is supplied."""
        network = HyperledgerFabricNetwork(
            stack,
            "TestHyperledgerFabricNetwork",
            network_name="TestNetwork",
            member_name="TestMember",
        )
        template = assertions.Template.from_stack(stack)

        template.resource_count_is("AWS::EC2::VPC", 1)
        template.has_resource_properties("AWS::EC2::VPC", {
            "CidrBlock": "10.0.0.0/16",
            "EnableDnsHostnames": True,
            "EnableDnsSupport": True,
        })

        # Isolated subnets only
        template.resource_count_is("AWS::EC2::InternetGateway", 0)
        template.resource_count_is("AWS::EC2::NatGateway", 0)

        template.resource_count_is("AWS::EC2::FlowLog", 1)
        template.resource_count_is("AWS::Logs::LogGroup", 1)
        template.resource_count_is("AWS::EC2::VPCEndpoint", 2)

        assert TOKEN_REGEXP.match(network.client.vpc.vpc_id)
        assert TOKEN_REGEXP.match(network.client.vpc_endpoint.vpc_endpoint_id)
        assert TOKEN_REGEXP.match(network.client.secrets_manager_vpc_endpoint.vpc_endpoint_id)

    def test_endpoints_on_existing_vpc(self, stack: cdk.Stack) -> None:
        """Test that a supplied VPC is used instead of creating one."""
        vpc = ec2.Vpc(
            stack,
            "ClientVpc",
            ip_addresses=ec2.IpAddresses.cidr("40.0.0.0/16"),
            subnet_configuration=[
                ec2.SubnetConfiguration(
                    name="Private",
                    subnet_type=ec2.SubnetType.PRIVATE_ISOLATED,
                ),
            ],
        )
        network = HyperledgerFabricNetwork(
            stack,
            "TestHyperledgerFabricNetwork",
            network_name="TestNetwork",
            member_name="TestMember",
            client=HyperledgerFabricClientProps(vpc=vpc),
        )
        template = assertions.Template.from_stack(stack)

        template.resource_count_is("AWS::EC2::VPC", 1)
        template.has_resource_properties("AWS::EC2::VPC", {
            "CidrBlock": "40.0.0.0/16",
        })
        template.resource_count_is("AWS::EC2::FlowLog", 1)
        template.resource_count_is("AWS::Logs::LogGroup", 1)
        template.resource_count_is("AWS::EC2::VPCEndpoint", 2)

        assert network.client.vpc is vpc
        assert TOKEN_REGEXP.match(network.client.vpc_endpoint.vpc_endpoint_id)
        assert TOKEN_REGEXP.match(network.client.secrets_manager_vpc_endpoint.vpc_endpoint_id)

    def test_secrets_manager_endpoint(self, stack: cdk.Stack) -> None:
        """Test that the Secrets Manager endpoint uses the standard service name."""
        HyperledgerFabricNetwork(
            stack,
            "TestHyperledgerFabricNetwork",
            network_name="TestNetwork",
            member_name="TestMember",
        )
        template = assertions.Template.from_stack(stack)

        template.has_resource_properties("AWS::EC2::VPCEndpoint", {
            "ServiceName": "com.amazonaws.us-east-1.secretsmanager",
            "VpcEndpointType": "Interface",
            "PrivateDnsEnabled": True,
        })

    def test_ledger_endpoint_uses_network_service_name(self, stack: cdk.Stack) -> None:
        """Test that the ledger endpoint service name comes from the network lookup."""
        HyperledgerFabricNetwork(
            stack,
            "TestHyperledgerFabricNetwork",
            network_name="TestNetwork",
            member_name="TestMember",
        )
        template = assertions.Template.from_stack(stack)

        endpoints = template.find_resources("AWS::EC2::VPCEndpoint", {
            "Properties": {"ServiceName": {"Fn::Join": assertions.Match.any_value()}},
        })
        assert len(endpoints) == 1
        (ledger_endpoint,) = endpoints.values()
        assert ledger_endpoint["Properties"]["PrivateDnsEnabled"] is True

        # The regional prefix is split off the looked-up name before the endpoint adds it back
        service_name = json.dumps(ledger_endpoint["Properties"]["ServiceName"])
        assert '"Fn::Split": ["com.amazonaws.us-east-1.",' in service_name
        assert "Fn::Select" in service_name
        assert "Network.VpcEndpointServiceName" in service_name
