"""
Unit tests package for the Hyperledger Fabric network CDK constructs.
"""
