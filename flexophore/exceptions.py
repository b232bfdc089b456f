"""
Custom exceptions for the flexophore package
"""


class FlexophoreError(Exception):
    """Base exception for Flexophore descriptor and matching errors"""
    pass


class ConfigurationError(FlexophoreError):
    """Raised for invalid configuration or an objective used before setup"""
    pass


class InvalidGraphError(FlexophoreError):
    """Raised for malformed complete graphs, node indices or text input"""
    pass


class CapabilityNotSupportedError(FlexophoreError):
    """Raised when a graph lacks a capability required by an operation"""

    def __init__(self, capability: str, obj: object):
        self.capability = capability
        super().__init__(
            f"{type(obj).__name__} does not implement {capability}."
        )


class DescriptorCalculationError(FlexophoreError):
    """Raised when a Flexophore descriptor cannot be generated for a molecule"""
    pass
