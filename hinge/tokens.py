"""
Hinge token stream.

A TokenStream wraps any iterable of string tokens into a single-pass iterator
with pushback. Consumers read with next(stream, Unset) and, when they decline a
token they already read, hand it back with stream.pushback(token) before any
sibling consumer gets a turn. That restore is what lets composites try their
children in any order without corrupting token order.

The stream also keeps a net position (tokens read minus tokens pushed back) so
composites can tell whether a round actually advanced the input.

    >>> stream = TokenStream(["-v", "file"])
    >>> token = next(stream)
    >>> stream.pushback(token)
    >>> list(stream)
    ['-v', 'file']
"""
from collections import deque
from collections.abc import Iterable

from .utils import Unset


class TokenStream:
    """
    Single-pass, pushback-capable sequence of string tokens.

    Owned by exactly one parse at a time; created per top-level parse call.
    """

    __slots__ = ("_iterator", "_pending", "_position")

    def __init__(self, tokens=(), /):
        if isinstance(tokens, str) or not isinstance(tokens, Iterable):
            raise TypeError("TokenStream() argument must be an iterable of strings")
        self._iterator = iter(tokens)
        self._pending = deque()
        self._position = 0

    def __iter__(self):
        return self

    def __next__(self):
        if self._pending:
            token = self._pending.popleft()
        else:
            token = next(self._iterator)
            if not isinstance(token, str):
                raise TypeError("token streams can only carry strings, got %r" % type(token).__name__)
        self._position += 1
        return token

    def pushback(self, token, /):
        """
        Restore a token previously read so that it is the next one returned.

        Tokens pushed back several times come out in reverse order of pushback,
        mirroring the order they were read in.
        """
        if not isinstance(token, str):
            raise TypeError("pushback() argument must be a string")
        self._pending.appendleft(token)
        self._position -= 1

    def peek(self, default=Unset, /):
        """
        Return the next token without consuming it (default when exhausted).
        """
        token = next(self, Unset)
        if token is Unset:
            return default
        self.pushback(token)
        return token

    @property
    def position(self):
        """
        Net count of tokens consumed so far.
        """
        return self._position

    @property
    def exhausted(self):
        return self.peek() is Unset

    def drain(self):
        """
        Consume and return every remaining token as a list.
        """
        return list(self)

    def __repr__(self):
        return "token-stream(position=%d, pending=%r)" % (self._position, list(self._pending))


__all__ = (
    "TokenStream",
)
