
class RangeViewError(Exception):
    """Base exception for all rangeview errors"""
    pass

class DimensionMismatch(RangeViewError, ValueError):
    """Range (or coordinate) has more dimensions than the dataset it is applied to"""
    pass

class IndexOutOfRange(RangeViewError, IndexError):
    """
    Coordinate or index does not exist in the extent it is resolved against
    (negative, or not below the selection cardinality)
    """
    pass

class RangeSyntaxError(RangeViewError, ValueError):
    """Range-like input could not be parsed into a Range"""
    pass

class UnboundedRange(RangeViewError, ValueError):
    """Open-ended selection needs an extent but none was given"""
    pass

class CapabilityNotImplemented(RangeViewError, NotImplementedError):
    """Capability not provided by this dataset / backend (e.g. query_view)"""
    pass

class ProviderFailure(RangeViewError):
    """
    The external data provider failed while resolving a request.
    The original exception is chained as __cause__; nothing is retried.
    """
    pass

class ReducerNotRegistered(RangeViewError, KeyError):
    """Reducer has no registered name and therefore cannot be persisted"""
    pass

class ConfigError(RangeViewError):
    """Invalid or inconsistent global.json / table config"""
    pass

class TableConfigError(ConfigError, ValueError):
    """Table config is structurally invalid for loading"""
    pass
