"""
Domain errors raised by the progression services.

Every error is recoverable: the API layer turns it into the
``{"success": false, "message": ...}`` envelope with ``status_code``.
"""


class ProgressionError(Exception):
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


# ----------------------------------------------------------------------
# NOT FOUND
# ----------------------------------------------------------------------

class NotFound(ProgressionError):
    status_code = 404


class UserNotFound(NotFound):
    pass


class LevelNotFound(NotFound):
    pass


class LevelNotOpen(NotFound):
    pass


class WordNotInLevel(NotFound):
    pass


class NoQuestions(NotFound):
    pass


# ----------------------------------------------------------------------
# PREREQUISITES
# ----------------------------------------------------------------------

class PrerequisiteNotMet(ProgressionError):
    status_code = 409


class LevelLocked(PrerequisiteNotMet):
    pass


class NoCompletedLevel(PrerequisiteNotMet):
    pass


class QuizNotAvailable(PrerequisiteNotMet):
    pass


# ----------------------------------------------------------------------
# DUPLICATES / LIMITS / INPUT
# ----------------------------------------------------------------------

class AlreadyExists(ProgressionError):
    status_code = 409


class AlreadyUnlocked(AlreadyExists):
    pass


class DuplicateAccount(AlreadyExists):
    pass


class LimitReached(ProgressionError):
    status_code = 409


class MaxLevelReached(LimitReached):
    pass


class InsufficientWords(LimitReached):
    pass


class InvalidInput(ProgressionError):
    status_code = 422
