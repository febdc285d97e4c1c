# -*- coding: utf-8 -*-


class ErrorPyException(Exception):
    """Base for all ErrorPy exceptions."""

    pass


class UserError(ErrorPyException):
    """An anticipated error made by a user.

    Raising this from a command tells the user that *they* made a mistake
    instead of reporting an internal error. Only the root cause of the chain is
    shown, without a code block, so Discord markdown in the message is kept.

    Accepts either a plain message or an existing exception. A wrapped
    exception becomes ``__cause__`` so its own causes stay part of the chain.
    """

    def __init__(self, error):
        super().__init__(str(error))
        if isinstance(error, BaseException):
            self.__cause__ = error

    @classmethod
    def from_str(cls, message: str) -> "UserError":
        return cls(message)


class PermissionFetchError(ErrorPyException):
    """The bot could not resolve permissions for the invoking user or itself."""

    pass
