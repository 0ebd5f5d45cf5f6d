class GreenButtonError(Exception): ...


class GreenButtonParseError(GreenButtonError): ...


class MalformedXmlError(GreenButtonParseError): ...


class InvalidFeedError(GreenButtonParseError): ...


class EmptyDataError(GreenButtonError): ...


class ValidationFailure(GreenButtonError): ...


def require(
    condition: bool, message: str, exc: type[GreenButtonError] = GreenButtonError
):
    """Raise the given exception if condition is False."""
    if not condition:
        raise exc(message)
