"""Error types raised by the Mezzich's Kappa engine."""

from typing import Optional


class MezzichKappaError(Exception):
    """Base class for every failure that aborts a kappa computation."""


class MalformedCodeSet(MezzichKappaError, ValueError):
    """A code index is negative, non-integral, or outside the code vocabulary."""

    def __init__(self, message: str, rater: Optional[int] = None, segment: Optional[int] = None):
        self.rater = rater
        self.segment = segment
        if rater is not None and segment is not None:
            message = f"Rater {rater + 1}, segment {segment + 1}: {message}"
        super().__init__(message)


class UndefinedSegmentAgreement(MezzichKappaError):
    """No rater pair scored the segment, so its agreement has no value."""

    def __init__(self, segment: int):
        self.segment = segment
        super().__init__(
            f"Segment {segment + 1} has no pair of raters who both applied a code; "
            "its proportional agreement is undefined."
        )


class NoCodingSchemesRecorded(MezzichKappaError):
    """No rater applied any code to any segment."""

    def __init__(self):
        super().__init__(
            "No coding schemes recorded: no rater applied any code to any segment."
        )


class DegenerateExpectedAgreement(MezzichKappaError):
    """Expected agreement of 1 leaves kappa with a zero denominator."""

    def __init__(self, expected_agreement: float):
        self.expected_agreement = expected_agreement
        super().__init__(
            f"Expected agreement (Pc) is {expected_agreement}; kappa is undefined when Pc = 1."
        )


class InvalidDegreesOfFreedom(MezzichKappaError):
    """Too few segments for a t-test on kappa."""

    def __init__(self, degrees_of_freedom: int):
        self.degrees_of_freedom = degrees_of_freedom
        super().__init__(
            f"Degrees of freedom must be at least 1 (got {degrees_of_freedom}); "
            "at least 2 segments are needed to test kappa."
        )


class ZeroStandardError(MezzichKappaError):
    """Kappa's standard error is zero, so the t statistic is undefined."""

    def __init__(self):
        super().__init__(
            "Standard error of kappa is 0 (observed equals expected agreement); "
            "the t statistic is undefined."
        )


class InvalidConfiguration(MezzichKappaError, ValueError):
    """An analysis setting is out of range."""


class DataLoadError(MezzichKappaError, ValueError):
    """A rater table could not be read or holds no segment rows."""
