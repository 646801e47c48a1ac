class CatalogUnavailable(Exception):
    """
    The medicine list could not be fetched or decoded.
    The storefront replaces itself with an error screen, no retry.
    """

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class SubmissionFailed(Exception):
    """
    An order submission did not succeed. `message` is what the server said,
    shown to the user as is.
    """

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)
