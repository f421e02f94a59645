# =========================
# Errors
# =========================
class HolidayError(Exception):
    pass


class InvalidDefinition(HolidayError, ValueError):
    pass


class ParseError(InvalidDefinition):
    pass


class UnknownFunction(HolidayError, LookupError):
    pass


class UnknownArgument(HolidayError, LookupError):
    pass
