"""
Exceptions - Error taxonomy for pmtables decoders
"""


class PMTablesError(Exception):
    """Base class for decoding errors"""
    pass


class UnexpectedStructureError(PMTablesError):
    """Malformed structure: a size, name length or offset outside its bounds"""
    pass


class UnreadableContainerError(PMTablesError, IOError):
    """File missing, truncated or shorter than its declared layout"""
    pass


class UnsupportedFormatError(PMTablesError):
    """Requested file format has no reader"""
    pass
