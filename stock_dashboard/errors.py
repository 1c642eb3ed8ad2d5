class QuoteProviderNotConfiguredError(RuntimeError):
    """Raised when the quote provider cannot be called (e.g. missing API key)."""


class RefreshInProgressError(RuntimeError):
    """Raised when a refresh is triggered while another cycle is still loading."""
