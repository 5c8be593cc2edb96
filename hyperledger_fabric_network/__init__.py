"""
AWS CDK constructs for Hyperledger Fabric networks on Amazon Managed Blockchain.
"""

from .client import HyperledgerFabricClient, HyperledgerFabricClientProps
from .network import (
    FrameworkVersion,
    HyperledgerFabricNetwork,
    NetworkEdition,
    ThresholdComparator,
)
from .utilities import (
    SUPPORTED_REGIONS,
    HyperledgerFabricError,
    InvalidPropertyError,
    UnsupportedRegionError,
)

__all__ = [
    "FrameworkVersion",
    "HyperledgerFabricClient",
    "HyperledgerFabricClientProps",
    "HyperledgerFabricError",
    "HyperledgerFabricNetwork",
    "InvalidPropertyError",
    "NetworkEdition",
    "SUPPORTED_REGIONS",
    "ThresholdComparator",
    "UnsupportedRegionError",
]
