"""Domain exceptions raised by the persistence gateway and report session."""


class ReportNotFound(LookupError):
    """No weekly report matches the requested key."""


class LineNotFound(LookupError):
    """No report line matches the requested key."""


class ReportNotEditable(Exception):
    """Lines and entries can only change while the report is a draft."""


class InvalidStatusTransition(Exception):
    """The requested status change is not allowed from the current status."""


class SubmissionNotAllowed(Exception):
    """The report cannot be submitted yet."""

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class InvalidValue(ValueError):
    """A count, target or entry date was rejected."""
