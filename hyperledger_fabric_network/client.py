"""
Client network access for a Hyperledger Fabric network on Amazon Managed Blockchain.

Hyperledger Fabric clients reach the ordering service, the certificate
authority and the peers through an interface VPC endpoint. This module
declares that endpoint together with a Secrets Manager endpoint, so that a
client in an isolated subnet can read the member admin credentials without
any route to the internet.
"""

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

from aws_cdk import Stack, aws_ec2 as ec2
from constructs import Construct

from .utilities import strip_service_name_prefix

if TYPE_CHECKING:
    from .network import HyperledgerFabricNetwork

logger = logging.getLogger(__name__)

DEFAULT_CLIENT_CIDR = "10.0.0.0/16"


@dataclass(frozen=True)
class HyperledgerFabricClientProps:
    """
    Construct properties for HyperledgerFabricClient.

    Attributes:
        vpc: Client VPC to create the endpoints in. If not provided, a VPC is
            created with CIDR 10.0.0.0/16 and PRIVATE_ISOLATED subnets only.
    """
    vpc: Optional[ec2.IVpc] = None


class HyperledgerFabricClient(Construct):
    """
    VPC and endpoints that let a Hyperledger Fabric client interact with the
    endpoints Amazon Managed Blockchain exposes for the network and member.

    Attributes:
        vpc: The client VPC holding the endpoints
        vpc_endpoint: Interface endpoint for the Managed Blockchain network
        secrets_manager_vpc_endpoint: Interface endpoint for Secrets Manager
    """

    def __init__(
        self,
        scope: "HyperledgerFabricNetwork",
        construct_id: str,
        *,
        vpc: Optional[ec2.IVpc] = None,
    ) -> None:
        super().__init__(scope, construct_id)

        region = Stack.of(self).region

        self.vpc = vpc if vpc is not None else self._create_vpc()

        # Defaults: all traffic, delivered to a new CloudWatch Logs group
        self.vpc.add_flow_log("FlowLog")

        service_name = strip_service_name_prefix(scope.vpc_endpoint_service_name, region)
        self.vpc_endpoint = self.vpc.add_interface_endpoint(
            "LedgerEndpoint",
            service=ec2.InterfaceVpcEndpointAwsService(service_name),
            open=False,
            private_dns_enabled=True,
        )

        self.secrets_manager_vpc_endpoint = self.vpc.add_interface_endpoint(
            "SecretsManagerEndpoint",
            service=ec2.InterfaceVpcEndpointAwsService.SECRETS_MANAGER,
        )

        logger.debug(
            "Declared client endpoints in %s VPC",
            "existing" if vpc is not None else "new",
        )

    def _create_vpc(self) -> ec2.Vpc:
        """Create an isolated VPC with no internet or NAT gateways."""
        return ec2.Vpc(
            self,
            "ClientVpc",
            ip_addresses=ec2.IpAddresses.cidr(DEFAULT_CLIENT_CIDR),
            subnet_configuration=[
                ec2.SubnetConfiguration(
                    name="Private",
                    subnet_type=ec2.SubnetType.PRIVATE_ISOLATED,
                ),
            ],
        )
