"""
Validation helpers for the Hyperledger Fabric network constructs.

Amazon Managed Blockchain rejects invalid names, descriptions and voting
policies only at deployment time, after CloudFormation has already started
creating resources. The checks in this module run at synth time instead so
that a bad configuration fails before any template is produced.
"""

import re
from enum import Enum
from typing import Optional, Pattern, Type, TypeVar

from aws_cdk import Fn, Token


# Regions where Amazon Managed Blockchain supports Hyperledger Fabric
SUPPORTED_REGIONS = (
    "ap-northeast-1",
    "ap-northeast-2",
    "ap-southeast-1",
    "eu-west-1",
    "eu-west-2",
    "us-east-1",
)

# Starts with a letter, no consecutive hyphens, no trailing hyphen
MEMBER_NAME_PATTERN = re.compile(r"^(?!-|[0-9])(?!.*--)(?!.*-$)[A-Za-z0-9-]+$")

NAME_MAX_LENGTH = 64
DESCRIPTION_MAX_LENGTH = 128
PROPOSAL_DURATION_RANGE = (1, 168)
THRESHOLD_PERCENTAGE_RANGE = (0, 100)

E = TypeVar("E", bound=Enum)


class HyperledgerFabricError(ValueError):
    """Base class for errors raised while declaring a Hyperledger Fabric network."""


class InvalidPropertyError(HyperledgerFabricError):
    """A construct property is malformed or out of range."""

    def __init__(self, property_name: str, value: object, constraint: str) -> None:
        self.property_name = property_name
        self.value = value
        super().__init__(f"Invalid {property_name} {value!r}: {constraint}")


class UnsupportedRegionError(HyperledgerFabricError):
    """The stack is deployed to a region without Managed Blockchain support."""

    def __init__(self, region: str) -> None:
        self.region = region
        if Token.is_unresolved(region):
            message = (
                "Region is not resolved; set an explicit env with a region on the stack. "
                f"Supported regions: {', '.join(SUPPORTED_REGIONS)}"
            )
        else:
            message = (
                f"Region {region} is not supported by Amazon Managed Blockchain for "
                f"Hyperledger Fabric. Supported regions: {', '.join(SUPPORTED_REGIONS)}"
            )
        super().__init__(message)


def validate_string(
    value: object,
    min_length: int,
    max_length: int,
    pattern: Optional[Pattern[str]] = None,
) -> bool:
    """Return True if value is a string within the length bounds and matching pattern."""
    if not isinstance(value, str):
        return False
    if not min_length <= len(value) <= max_length:
        return False
    if pattern is not None and pattern.fullmatch(value) is None:
        return False
    return True


def validate_integer(value: object, min_value: int, max_value: int) -> bool:
    """Return True if value is an int (not a bool) within the inclusive bounds."""
    if isinstance(value, bool) or not isinstance(value, int):
        return False
    return min_value <= value <= max_value


def check_region(region: str) -> None:
    if region not in SUPPORTED_REGIONS:
        raise UnsupportedRegionError(region)


def check_network_name(name: object) -> None:
    if not validate_string(name, 1, NAME_MAX_LENGTH):
        raise InvalidPropertyError(
            "network name", name, f"must be a string of 1-{NAME_MAX_LENGTH} characters"
        )


def check_member_name(name: object) -> None:
    """
    Check a member name against the Managed Blockchain naming rules.

    The name must be 1-64 characters, start with a letter, contain only
    letters, digits and hyphens, and may not contain consecutive hyphens or
    end with a hyphen.
    """
    if not validate_string(name, 1, NAME_MAX_LENGTH):
        raise InvalidPropertyError(
            "member name", name, f"must be a string of 1-{NAME_MAX_LENGTH} characters"
        )
    if not validate_string(name, 1, NAME_MAX_LENGTH, MEMBER_NAME_PATTERN):
        raise InvalidPropertyError(
            "member name",
            name,
            "must start with a letter and contain only letters, digits and single "
            "hyphens, and may not end with a hyphen",
        )


def check_description(property_name: str, description: object) -> None:
    if not validate_string(description, 0, DESCRIPTION_MAX_LENGTH):
        raise InvalidPropertyError(
            property_name,
            description,
            f"must be a string of at most {DESCRIPTION_MAX_LENGTH} characters",
        )


def check_proposal_duration(hours: object) -> None:
    low, high = PROPOSAL_DURATION_RANGE
    if not validate_integer(hours, low, high):
        raise InvalidPropertyError(
            "proposal duration in hours", hours, f"must be an integer from {low} to {high}"
        )


def check_threshold_percentage(percentage: object) -> None:
    low, high = THRESHOLD_PERCENTAGE_RANGE
    if not validate_integer(percentage, low, high):
        raise InvalidPropertyError(
            "threshold percentage", percentage, f"must be an integer from {low} to {high}"
        )


def check_flag(property_name: str, value: object) -> None:
    if not isinstance(value, bool):
        raise InvalidPropertyError(property_name, value, "must be True or False")


def coerce_enum(property_name: str, enum_type: Type[E], value: object) -> E:
    """Return the enum_type member for value, which may be a member or a member's value."""
    try:
        return enum_type(value)
    except ValueError:
        allowed = ", ".join(member.value for member in enum_type)
        raise InvalidPropertyError(
            property_name, value, f"must be one of {allowed}"
        ) from None


def strip_service_name_prefix(service_name: str, region: str) -> str:
    """
    Remove the ``com.amazonaws.<region>.`` prefix from a VPC endpoint service name.

    The service name reported by Managed Blockchain is only known after
    deployment, so for tokens the prefix is stripped by CloudFormation
    intrinsics instead of in Python.
    """
    prefix = f"com.amazonaws.{region}."
    if Token.is_unresolved(service_name):
        return Fn.select(1, Fn.split(prefix, service_name))
    if not service_name.startswith(prefix):
        raise InvalidPropertyError(
            "VPC endpoint service name", service_name, f"must start with {prefix}"
        )
    return service_name[len(prefix):]


def parse_context_integer(property_name: str, value: object) -> Optional[int]:
    """
    Convert a CDK context value to an int.

    Context passed with ``cdk deploy -c key=value`` always arrives as a
    string, while cdk.json context keeps its JSON type. None means unset.
    """
    if value is None or (isinstance(value, int) and not isinstance(value, bool)):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            pass
    raise InvalidPropertyError(property_name, value, "must be an integer")


def parse_context_flag(property_name: str, value: object) -> Optional[bool]:
    """Convert a CDK context value to a bool, accepting "true" and "false" strings."""
    if value is None or isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in ("true", "false"):
        return value.strip().lower() == "true"
    raise InvalidPropertyError(property_name, value, "must be true or false")
