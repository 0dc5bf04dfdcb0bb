class HuffmanError(ValueError):
    """Base class for everything the codec raises on bad input."""


class InvalidInput(HuffmanError):
    pass


class UnknownSymbol(HuffmanError):
    def __init__(self, symbol):
        super().__init__(f"Symbol {symbol!r} has no code in the table")
        self.symbol = symbol


class CorruptPayload(HuffmanError):
    pass


class MalformedHeader(HuffmanError):
    pass
