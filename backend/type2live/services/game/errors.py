"""Errors raised by the turn and scoring engine.

Each error carries a stable ``code`` and a ``status`` so the transport layer
can turn it into a JSON error payload without inspecting the message.
"""


class GameError(Exception):
    code = 'game_error'
    status = 400

    def __init__(self, message: str = ''):
        super().__init__(message or self.code)
        self.message = message or self.code

    def to_dict(self):
        return {'error': self.message, 'code': self.code}


class DictionaryExhausted(GameError):
    """No eligible dictionary entries exist for any turn kind. Fatal to the session."""
    code = 'dictionary_exhausted'
    status = 503


class InvalidSubmissionState(GameError):
    """Submit/pass with no active turn, or after the session ended."""
    code = 'invalid_state'
    status = 409


class UnauthorizedMutation(GameError):
    code = 'unauthorized'
    status = 403


class MalformedInput(GameError):
    code = 'malformed_input'
    status = 400
