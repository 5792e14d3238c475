class StreamDeplException(Exception):
    """Base exception for the streamdepl package"""

    pass


class InvalidParameter(StreamDeplException):
    """An aquifer or engine input is outside its valid range

    Parameters
    ----------
    field: string
        name of the offending input
    value: object
        the value that was rejected
    """

    def __init__(self, field, value, reason=None):
        self.field = field
        self.value = value
        msg = f"invalid value for {field}: {value!r}"
        if reason is not None:
            msg += f" ({reason})"
        super().__init__(msg)


class EmptySchedule(StreamDeplException):
    def __init__(self, msg="pumping schedule has no periods"):
        super().__init__(msg)


class NonPositivePeriodLength(StreamDeplException):
    def __init__(self, value):
        self.value = value
        super().__init__(f"period length must be positive, got {value!r}")


class OutOfRangeTable(StreamDeplException):
    """Raised for a malformed unit response function table"""

    def __init__(self, reason):
        self.reason = reason
        super().__init__(f"malformed unit response table: {reason}")
