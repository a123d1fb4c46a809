"""
Error types raised by the datacenter fabric, route generation and driver
"""


class ConfigurationError(ValueError):
    """
    Invalid testbed configuration

    Raised while building the fabric or constructing a generator/driver,
    before any simulation object is created. Values are never clamped.
    """


class InvariantViolation(AssertionError):
    """
    A fabric invariant was broken by the caller

    Out-of-range server or switch indices, a flow from a server to itself,
    or a core selection strategy returning an invalid core. These indicate a
    programming error and are not retried.
    """
