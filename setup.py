"""
Setup configuration for the Hyperledger Fabric network CDK constructs.

This setup.py file configures the Python package for the CDK construct
library that deploys Hyperledger Fabric networks with Amazon Managed
Blockchain, together with the client VPC endpoints used to reach them.
"""

from setuptools import setup, find_packages
import os

# Read the README file for long description
readme_path = os.path.join(os.path.dirname(__file__), "README.md")
long_description = ""
if os.path.exists(readme_path):
    with open(readme_path, "r", encoding="utf-8") as fh:
        long_description = fh.read()

setup(
    name="hyperledger-fabric-network-cdk",
    version="1.0.0",
    description="AWS CDK Python constructs for Hyperledger Fabric networks on Amazon Managed Blockchain",
    long_description=long_description,
    long_description_content_type="text/markdown",
    license="MIT-0",

    # Package configuration
    packages=find_packages(exclude=["tests*"]),
    py_modules=["app"],
    python_requires=">=3.8",

    # Dependencies
    install_requires=[
        "aws-cdk-lib>=2.100.0,<3.0.0",
        "constructs>=10.0.0,<11.0.0",
        "cdk-nag>=2.27.0,<3.0.0",
    ],

    # Entry points for CLI commands
    entry_points={
        "console_scripts": [
            "hyperledger-fabric-synth=app:main",
        ],
    },

    # Package classifiers
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Intended Audience :: System Administrators",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Topic :: Software Development :: Libraries :: Python Modules",
        "Topic :: System :: Systems Administration",
    ],

    # Keywords for package discovery
    keywords=[
        "aws",
        "cdk",
        "blockchain",
        "hyperledger-fabric",
        "managed-blockchain",
        "infrastructure-as-code",
        "cloudformation",
    ],

    # Development dependencies (optional)
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
            "black>=23.0.0",
            "flake8>=6.0.0",
            "mypy>=1.0.0",
        ],
    },

    zip_safe=False,
)
