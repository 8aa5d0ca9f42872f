#!/usr/bin/env python3
"""
Exception types for hipster.

Core operations degrade instead of raising; these exceptions mark the seams
where a lower layer signals a failure that the layer above absorbs and
reports to a diagnostic sink.
"""


class HipsterError(Exception):
    """Base exception for hipster errors"""


class AssemblyReadError(HipsterError):
    """Exception raised when an assembly file cannot be read or decoded"""


class DemangleError(HipsterError):
    """Exception raised when the external demangler cannot produce a name"""


class ConfigurationError(HipsterError):
    """Exception raised for invalid user-supplied configuration"""


class SelectionError(HipsterError):
    """Exception raised when a session request refers to a missing match"""
