"""
Hyperledger Fabric network and founding member on Amazon Managed Blockchain.

The HyperledgerFabricNetwork construct declares:
- Secrets Manager secrets for the member admin password, private key and signed certificate
- A single AWS::ManagedBlockchain::Member resource that creates the network and its first member
- Custom resources that read the orderer, CA and VPC endpoint service values after deployment
- A nested HyperledgerFabricClient with the VPC endpoints clients need
"""

import logging
from enum import Enum
from typing import Optional, Union

from aws_cdk import (
    Stack,
    aws_managedblockchain as managedblockchain,
    aws_secretsmanager as secretsmanager,
    custom_resources as cr,
)
from constructs import Construct

from . import utilities
from .client import HyperledgerFabricClient, HyperledgerFabricClientProps

logger = logging.getLogger(__name__)

FRAMEWORK = "HYPERLEDGER_FABRIC"
ADMIN_USERNAME = "admin"

DEFAULT_PROPOSAL_DURATION_IN_HOURS = 24
DEFAULT_THRESHOLD_PERCENTAGE = 50

# Characters Managed Blockchain does not accept in an admin password
ADMIN_PASSWORD_EXCLUDED_CHARACTERS = "'\"/\\@ "


class FrameworkVersion(str, Enum):
    """Hyperledger Fabric framework versions supported by Managed Blockchain."""
    VERSION_1_2 = "1.2"
    VERSION_1_4 = "1.4"


class NetworkEdition(str, Enum):
    """Network editions; STARTER caps the number of members, nodes and channels."""
    STARTER = "STARTER"
    STANDARD = "STANDARD"


class ThresholdComparator(str, Enum):
    """How the vote percentage is compared with the approval threshold."""
    GREATER_THAN = "GREATER_THAN"
    GREATER_THAN_OR_EQUAL_TO = "GREATER_THAN_OR_EQUAL_TO"


class HyperledgerFabricNetwork(Construct):
    """
    Creates a Hyperledger Fabric network on Amazon Managed Blockchain.

    All properties are validated before anything is added to the construct
    tree; a HyperledgerFabricError leaves the scope untouched.

    Attributes:
        network_id: Managed Blockchain network identifier (token)
        member_id: Managed Blockchain member identifier (token)
        vpc_endpoint_service_name: Fully qualified VPC endpoint service name (token)
        orderer_endpoint: Ordering service endpoint (token)
        ca_endpoint: Member certificate authority endpoint (token)
        admin_password_secret: Secret holding the member admin password
        admin_private_key_secret: Secret for the admin private key, filled after enrollment
        admin_signed_cert_secret: Secret for the admin signed certificate, filled after enrollment
        client: Client VPC and endpoints
    """

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        *,
        network_name: str,
        member_name: str,
        network_description: Optional[str] = None,
        member_description: Optional[str] = None,
        framework_version: Union[FrameworkVersion, str, None] = None,
        network_edition: Union[NetworkEdition, str, None] = None,
        proposal_duration_in_hours: Optional[int] = None,
        threshold_percentage: Optional[int] = None,
        threshold_comparator: Union[ThresholdComparator, str, None] = None,
        enable_ca_logging: Optional[bool] = None,
        client: Optional[HyperledgerFabricClientProps] = None,
    ) -> None:
        """
        Initialize the Hyperledger Fabric network.

        Args:
            scope: Parent construct; must belong to a stack with a supported region
            construct_id: The scoped construct ID
            network_name: Managed Blockchain network name, 1-64 characters
            member_name: Founding member name, 1-64 characters starting with a letter
            network_description: Network description, defaults to the network name
            member_description: Member description, defaults to the member name
            framework_version: Hyperledger Fabric version, defaults to the latest supported
            network_edition: Network edition, defaults to STANDARD
            proposal_duration_in_hours: Voting window for proposals, 1-168, defaults to 24
            threshold_percentage: Approval threshold, 0-100, defaults to 50
            threshold_comparator: Threshold comparison, defaults to GREATER_THAN
            enable_ca_logging: Publish CA logs to CloudWatch, defaults to True
            client: Client network properties

        Raises:
            InvalidPropertyError: A property violates its constraint
            UnsupportedRegionError: The stack region has no Managed Blockchain support
        """
        region = Stack.of(scope).region

        # Populate values from input properties, using defaults if not provided
        if network_description is None:
            network_description = network_name
        if member_description is None:
            member_description = member_name
        if framework_version is None:
            framework_version = FrameworkVersion.VERSION_1_4
        if network_edition is None:
            network_edition = NetworkEdition.STANDARD
        if proposal_duration_in_hours is None:
            proposal_duration_in_hours = DEFAULT_PROPOSAL_DURATION_IN_HOURS
        if threshold_percentage is None:
            threshold_percentage = DEFAULT_THRESHOLD_PERCENTAGE
        if threshold_comparator is None:
            threshold_comparator = ThresholdComparator.GREATER_THAN
        if enable_ca_logging is None:
            enable_ca_logging = True
        if client is None:
            client = HyperledgerFabricClientProps()

        # Validate before the construct joins the tree so a failure leaves no partial declaration
        utilities.check_region(region)
        utilities.check_network_name(network_name)
        utilities.check_description("network description", network_description)
        utilities.check_member_name(member_name)
        utilities.check_description("member description", member_description)
        utilities.check_proposal_duration(proposal_duration_in_hours)
        utilities.check_threshold_percentage(threshold_percentage)
        utilities.check_flag("enable CA logging", enable_ca_logging)
        framework_version = utilities.coerce_enum(
            "framework version", FrameworkVersion, framework_version
        )
        network_edition = utilities.coerce_enum("network edition", NetworkEdition, network_edition)
        threshold_comparator = utilities.coerce_enum(
            "threshold comparator", ThresholdComparator, threshold_comparator
        )

        super().__init__(scope, construct_id)

        self.region = region
        self.network_name = network_name
        self.network_description = network_description
        self.member_name = member_name
        self.member_description = member_description
        self.framework_version = framework_version
        self.network_edition = network_edition
        self.proposal_duration_in_hours = proposal_duration_in_hours
        self.threshold_percentage = threshold_percentage
        self.threshold_comparator = threshold_comparator
        self.enable_ca_logging = enable_ca_logging
        self.admin_username = ADMIN_USERNAME

        self._create_admin_secrets()

        member = self._create_network_member()
        self.network_id = member.attr_network_id
        self.member_id = member.attr_member_id

        self._create_attribute_lookups()
        self._configure_ca_logging()

        self.client = HyperledgerFabricClient(self, "Client", vpc=client.vpc)

        logger.info(
            "Declared Hyperledger Fabric network %s with member %s in %s",
            self.network_name,
            self.member_name,
            self.region,
        )

    def _create_admin_secrets(self) -> None:
        """Create the secrets for the member admin credentials."""
        self.admin_password_secret = secretsmanager.Secret(
            self,
            "AdminPassword",
            description=f"Admin password for Hyperledger Fabric member {self.member_name}",
            generate_secret_string=secretsmanager.SecretStringGenerator(
                exclude_characters=ADMIN_PASSWORD_EXCLUDED_CHARACTERS,
                password_length=32,
                require_each_included_type=True,
            ),
        )

        # Populated out-of-band once the admin identity is enrolled with the CA
        self.admin_private_key_secret = secretsmanager.Secret(
            self,
            "AdminPrivateKey",
            description=f"Admin private key for Hyperledger Fabric member {self.member_name}",
        )
        self.admin_signed_cert_secret = secretsmanager.Secret(
            self,
            "AdminSignedCert",
            description=f"Admin signed certificate for Hyperledger Fabric member {self.member_name}",
        )
        logger.debug("Declared admin credential secrets for member %s", self.member_name)

    def _create_network_member(self) -> managedblockchain.CfnMember:
        """Create the network together with its founding member."""
        network_configuration = managedblockchain.CfnMember.NetworkConfigurationProperty(
            name=self.network_name,
            description=self.network_description,
            framework=FRAMEWORK,
            framework_version=self.framework_version.value,
            network_framework_configuration=managedblockchain.CfnMember.NetworkFrameworkConfigurationProperty(
                network_fabric_configuration=managedblockchain.CfnMember.NetworkFabricConfigurationProperty(
                    edition=self.network_edition.value,
                ),
            ),
            voting_policy=managedblockchain.CfnMember.VotingPolicyProperty(
                approval_threshold_policy=managedblockchain.CfnMember.ApprovalThresholdPolicyProperty(
                    proposal_duration_in_hours=self.proposal_duration_in_hours,
                    threshold_percentage=self.threshold_percentage,
                    threshold_comparator=self.threshold_comparator.value,
                ),
            ),
        )

        member_configuration = managedblockchain.CfnMember.MemberConfigurationProperty(
            name=self.member_name,
            description=self.member_description,
            member_framework_configuration=managedblockchain.CfnMember.MemberFrameworkConfigurationProperty(
                member_fabric_configuration=managedblockchain.CfnMember.MemberFabricConfigurationProperty(
                    admin_username=self.admin_username,
                    admin_password=self.admin_password_secret.secret_value.unsafe_unwrap(),
                ),
            ),
        )

        member = managedblockchain.CfnMember(
            self,
            "Network",
            network_configuration=network_configuration,
            member_configuration=member_configuration,
        )
        logger.debug(
            "Declared network %s (%s %s, %s edition)",
            self.network_name,
            FRAMEWORK,
            self.framework_version.value,
            self.network_edition.value,
        )
        return member

    def _create_attribute_lookups(self) -> None:
        """
        Read network and member attributes that CloudFormation does not return.

        The orderer endpoint, VPC endpoint service name and CA endpoint are
        only available from the Managed Blockchain API, so they are fetched by
        custom resources during deployment.
        """
        policy = cr.AwsCustomResourcePolicy.from_sdk_calls(
            resources=cr.AwsCustomResourcePolicy.ANY_RESOURCE,
        )

        network_data_call = cr.AwsSdkCall(
            service="ManagedBlockchain",
            action="getNetwork",
            parameters={"NetworkId": self.network_id},
            physical_resource_id=cr.PhysicalResourceId.of("Id"),
        )
        network_data = cr.AwsCustomResource(
            self,
            "NetworkDataResource",
            policy=policy,
            on_create=network_data_call,
            on_update=network_data_call,
            install_latest_aws_sdk=False,
        )
        self.vpc_endpoint_service_name = network_data.get_response_field(
            "Network.VpcEndpointServiceName"
        )
        self.orderer_endpoint = network_data.get_response_field(
            "Network.FrameworkAttributes.Fabric.OrderingServiceEndpoint"
        )

        member_data_call = cr.AwsSdkCall(
            service="ManagedBlockchain",
            action="getMember",
            parameters={"NetworkId": self.network_id, "MemberId": self.member_id},
            physical_resource_id=cr.PhysicalResourceId.of("Id"),
        )
        member_data = cr.AwsCustomResource(
            self,
            "MemberDataResource",
            policy=policy,
            on_create=member_data_call,
            on_update=member_data_call,
            install_latest_aws_sdk=False,
        )
        self.ca_endpoint = member_data.get_response_field(
            "Member.FrameworkAttributes.Fabric.CaEndpoint"
        )

    def _configure_ca_logging(self) -> None:
        """Turn CloudWatch publishing of the member CA logs on or off."""
        ca_logging_call = cr.AwsSdkCall(
            service="ManagedBlockchain",
            action="updateMember",
            parameters={
                "NetworkId": self.network_id,
                "MemberId": self.member_id,
                "LogPublishingConfiguration": {
                    "Fabric": {
                        "CaLogs": {
                            "Cloudwatch": {"Enabled": self.enable_ca_logging},
                        },
                    },
                },
            },
            physical_resource_id=cr.PhysicalResourceId.of(f"{self.node.id}-CaLogging"),
        )
        cr.AwsCustomResource(
            self,
            "CaLoggingResource",
            policy=cr.AwsCustomResourcePolicy.from_sdk_calls(
                resources=cr.AwsCustomResourcePolicy.ANY_RESOURCE,
            ),
            on_create=ca_logging_call,
            on_update=ca_logging_call,
            install_latest_aws_sdk=False,
        )
        logger.debug(
            "CA logging %s for member %s",
            "enabled" if self.enable_ca_logging else "disabled",
            self.member_name,
        )
