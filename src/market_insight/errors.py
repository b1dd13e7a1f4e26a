# src/market_insight/errors.py


class PrimaryDataError(Exception):
    """
    The primary quote for a symbol could not be fetched.
    Fatal for the analysis request; routers answer it with HTTP 502.
    """

    def __init__(self, symbol: str, cause: str):
        self.symbol = symbol
        self.cause = cause
        super().__init__(
            f"Unable to fetch real market data for {symbol}. "
            f"Please check the symbol and try again."
        )
