#!/usr/bin/env python3
"""
AWS CDK Python application for a Hyperledger Fabric network on Amazon Managed Blockchain.

This application deploys:
- A Hyperledger Fabric network with its founding member
- Secrets Manager secrets for the member admin credentials
- A client VPC with flow logs and VPC endpoints for Managed Blockchain and Secrets Manager

Configuration is read from CDK context (see cdk.json), for example:

    cdk deploy -c network_name=SupplyChain -c member_name=OrganizationA
"""

import logging
import os
import sys
from typing import Any, Dict, Optional

from aws_cdk import (
    App,
    Aspects,
    CfnOutput,
    Environment,
    Stack,
    Tags,
    aws_ec2 as ec2,
)
from cdk_nag import AwsSolutionsChecks, NagPackSuppression, NagSuppressions
from constructs import Construct

from hyperledger_fabric_network import (
    HyperledgerFabricClientProps,
    HyperledgerFabricError,
    HyperledgerFabricNetwork,
)
from hyperledger_fabric_network.utilities import parse_context_flag, parse_context_integer

logger = logging.getLogger(__name__)


class HyperledgerFabricStack(Stack):
    """
    CDK Stack for a Hyperledger Fabric network and its client network access.

    The network, member and voting policy are taken from CDK context; unset
    values fall back to the construct defaults.
    """

    def __init__(self, scope: Construct, construct_id: str, **kwargs) -> None:
        super().__init__(scope, construct_id, **kwargs)

        config = self._get_configuration()

        self.network = HyperledgerFabricNetwork(
            self,
            "HyperledgerFabricNetwork",
            network_name=config["network_name"],
            network_description=config["network_description"],
            member_name=config["member_name"],
            member_description=config["member_description"],
            framework_version=config["framework_version"],
            network_edition=config["network_edition"],
            proposal_duration_in_hours=config["proposal_duration_in_hours"],
            threshold_percentage=config["threshold_percentage"],
            threshold_comparator=config["threshold_comparator"],
            enable_ca_logging=config["enable_ca_logging"],
            client=HyperledgerFabricClientProps(vpc=self._lookup_client_vpc(config)),
        )

        Tags.of(self).add("Project", "HyperledgerFabricNetwork")
        Tags.of(self).add("NetworkName", self.network.network_name)

        self._apply_nag_suppressions()
        self._create_outputs()

    def _get_configuration(self) -> Dict[str, Any]:
        """
        Get configuration values from CDK context.

        Values passed with `cdk deploy -c` arrive as strings, so numbers and
        flags are parsed here.

        Returns:
            Dictionary containing configuration values
        """
        return {
            "network_name": self.node.try_get_context("network_name") or "HyperledgerFabricNetwork",
            "network_description": self.node.try_get_context("network_description"),
            "member_name": self.node.try_get_context("member_name") or "FoundingMember",
            "member_description": self.node.try_get_context("member_description"),
            "framework_version": self.node.try_get_context("framework_version"),
            "network_edition": self.node.try_get_context("network_edition"),
            "proposal_duration_in_hours": parse_context_integer(
                "proposal duration in hours", self.node.try_get_context("proposal_duration_in_hours")
            ),
            "threshold_percentage": parse_context_integer(
                "threshold percentage", self.node.try_get_context("threshold_percentage")
            ),
            "threshold_comparator": self.node.try_get_context("threshold_comparator"),
            "enable_ca_logging": parse_context_flag(
                "enable CA logging", self.node.try_get_context("enable_ca_logging")
            ),
            "client_vpc_id": self.node.try_get_context("client_vpc_id"),
        }

    def _lookup_client_vpc(self, config: Dict[str, Any]) -> Optional[ec2.IVpc]:
        """Look up an existing client VPC, or return None to let the construct create one."""
        vpc_id = config["client_vpc_id"]
        if not vpc_id:
            return None
        logger.info("Using existing client VPC %s", vpc_id)
        return ec2.Vpc.from_lookup(self, "ExistingClientVpc", vpc_id=vpc_id)

    def _apply_nag_suppressions(self) -> None:
        """
        Apply CDK Nag suppressions for findings inherent to the design
        """
        NagSuppressions.add_stack_suppressions(
            self,
            [
                NagPackSuppression(
                    id="AwsSolutions-IAM4",
                    reason="The custom resource provider uses the AWS managed Lambda basic execution role.",
                ),
                NagPackSuppression(
                    id="AwsSolutions-IAM5",
                    reason="Managed Blockchain network and member ARNs are only known after creation.",
                ),
                NagPackSuppression(
                    id="AwsSolutions-L1",
                    reason="The custom resource provider runtime is managed by the CDK.",
                ),
                NagPackSuppression(
                    id="AwsSolutions-SMG4",
                    reason="Admin credentials are tied to the Fabric CA enrollment and cannot be rotated automatically.",
                ),
            ],
        )

    def _create_outputs(self) -> None:
        """Create CloudFormation outputs for key resources."""
        CfnOutput(
            self,
            "NetworkId",
            value=self.network.network_id,
            description="Amazon Managed Blockchain Network ID",
        )

        CfnOutput(
            self,
            "MemberId",
            value=self.network.member_id,
            description="Founding Member ID",
        )

        CfnOutput(
            self,
            "OrdererEndpoint",
            value=self.network.orderer_endpoint,
            description="Hyperledger Fabric Ordering Service Endpoint",
        )

        CfnOutput(
            self,
            "CaEndpoint",
            value=self.network.ca_endpoint,
            description="Member Certificate Authority Endpoint",
        )

        CfnOutput(
            self,
            "VpcEndpointServiceName",
            value=self.network.vpc_endpoint_service_name,
            description="VPC Endpoint Service Name for the network",
        )

        CfnOutput(
            self,
            "AdminPasswordSecretArn",
            value=self.network.admin_password_secret.secret_arn,
            description="Secret holding the member admin password",
        )

        CfnOutput(
            self,
            "AdminPrivateKeySecretArn",
            value=self.network.admin_private_key_secret.secret_arn,
            description="Secret for the member admin private key",
        )

        CfnOutput(
            self,
            "AdminSignedCertSecretArn",
            value=self.network.admin_signed_cert_secret.secret_arn,
            description="Secret for the member admin signed certificate",
        )

        CfnOutput(
            self,
            "ClientVpcId",
            value=self.network.client.vpc.vpc_id,
            description="Client VPC ID",
        )


def create_app(context: Optional[Dict[str, Any]] = None) -> App:
    """
    Build the CDK app with the Hyperledger Fabric stack.

    Args:
        context: Extra context values, merged with cdk.json and `cdk -c` context

    Raises:
        HyperledgerFabricError: The context holds an invalid network configuration
    """
    app = App(context=context)

    logging.basicConfig(
        level=str(app.node.try_get_context("log_level") or "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    env = Environment(
        account=app.node.try_get_context("account") or os.environ.get("CDK_DEFAULT_ACCOUNT"),
        region=app.node.try_get_context("region") or os.environ.get("CDK_DEFAULT_REGION") or "us-east-1",
    )

    HyperledgerFabricStack(
        app,
        "HyperledgerFabricStack",
        env=env,
        description="Hyperledger Fabric network on Amazon Managed Blockchain",
    )

    # Apply CDK Nag for security best practices
    enable_cdk_nag = parse_context_flag("enable cdk nag", app.node.try_get_context("enable_cdk_nag"))
    if enable_cdk_nag is not False:
        Aspects.of(app).add(AwsSolutionsChecks(verbose=True))

    return app


def main() -> None:
    """Main application entry point."""
    try:
        app = create_app()
    except HyperledgerFabricError as err:
        logger.error("Invalid network configuration: %s", err)
        sys.exit(1)

    app.synth()


if __name__ == "__main__":
    main()
