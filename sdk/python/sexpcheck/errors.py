"""Parse errors. Wellformedness violations live in :mod:`sexpcheck.wellformed`."""

from typing import Optional

from .types import TokInfo


class ParsingError(Exception):
    pass


class InvalidSyntax(ParsingError):
    """A token that cannot be interpreted where it appears."""

    def __init__(self, tokinfo: TokInfo, token: str, message: Optional[str] = None):
        self.tokinfo = tokinfo
        self.token = token
        self.message = message
        super().__init__(str(self))

    def __str__(self) -> str:
        text = f"Invalid syntax `{self.token}` : {self.tokinfo}"
        if self.message:
            text += f"\nError: {self.message}"
        return text


class GrammarFailure(ParsingError):
    """The tokenizer rejected the input outright."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    def __str__(self) -> str:
        return f"Grammar error:\n {self.message}"


class NothingToParse(ParsingError):
    """Input held only a datum comment. Callers usually skip it."""

    def __str__(self) -> str:
        return "Nothing to parse"


class MalformedExpectation(ParsingError):
    def __init__(self, message: Optional[str] = None):
        self.message = message
        super().__init__(message)

    def __str__(self) -> str:
        if self.message:
            return f"Bad wellformed config: {self.message}"
        return "Bad wellformed config"
