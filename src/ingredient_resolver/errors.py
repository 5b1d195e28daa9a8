"""Error taxonomy for ingredient resolution."""


class ResolverError(Exception):
    """Base class for ingredient resolver errors."""


class ParseFailure(ResolverError):
    """Quantity or name could not be extracted from an ingredient line."""


class NoQuantity(ParseFailure):
    """Leading tokens contain no recognizable number."""


class ExternalApiUnavailable(ResolverError):
    """External nutrition API is unconfigured, timed out, or returned an error."""


class CorpusUnavailableError(ResolverError):
    """The food corpus cannot be reached or is not configured."""
