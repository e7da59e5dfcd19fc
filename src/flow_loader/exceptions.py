"""
Flow loader exceptions.
"""


class FlowLoaderError(Exception):
    """Base error for flow loading."""


class FlowFormatError(FlowLoaderError, ValueError):
    """The file or a record in it is not a recognizable flow export."""
