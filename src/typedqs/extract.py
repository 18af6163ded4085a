"""werkzeug request adapter.

Pulls the raw query string out of a WSGI environ or a werkzeug (or Flask)
request, decodes it, and turns decode failures into ``400 Bad Request``.
"""
import functools

from werkzeug.exceptions import BadRequest, RequestURITooLarge

from typedqs.config import Config
from typedqs.decoder import decode, mode_for
from typedqs.errors import DecodeError
from typedqs.logging import create_logger


class QueryStringRejection(BadRequest):
    """A query string that does not decode into the requested type.

    The :class:`~typedqs.errors.DecodeError` is kept on ``error`` and
    chained as ``__cause__``.
    """

    def __init__(self, error, description=None):
        self.error = error
        if description is None:
            description = f"Failed to deserialize query string: {error}"
        super().__init__(description)


class QueryString:
    """Decode request query strings into ``target``.

    The mode is, in order of preference, the ``mode`` argument, the
    target's ``__querystring_mode__`` attribute, or ``QUERYSTRING_MODE``
    from ``config``.

    Used as a decorator, it wraps a view that takes the request as its
    first argument and passes the decoded value as the ``query`` keyword::

        @QueryString(Pagination)
        def index(request, query):
            ...
    """

    def __init__(self, target, mode=None, *, config=None, deny_unknown_fields=None):
        if config is None:
            config = Config()
        elif not isinstance(config, Config):
            config = Config(config)
        self.target = target
        self.mode = mode
        self.config = config
        self.deny_unknown_fields = deny_unknown_fields
        self._logger = None

    @property
    def logger(self):
        if self._logger is None:
            self._logger = create_logger(
                "typedqs.extract", debug=bool(self.config["DEBUG"])
            )
        return self._logger

    def resolve_mode(self):
        if self.mode is not None:
            return self.mode
        return mode_for(self.target, self.config.mode())

    def decode(self, query_string):
        """Decode raw query-string bytes or raise an HTTP exception."""
        max_length = self.config["QUERYSTRING_MAX_LENGTH"]
        if max_length is not None and len(query_string) > max_length:
            self.logger.info(
                "rejected query string of %d bytes (limit %d)",
                len(query_string),
                max_length,
            )
            raise RequestURITooLarge(
                f"The query string is longer than {max_length} bytes."
            )

        deny_unknown_fields = self.deny_unknown_fields
        if deny_unknown_fields is None:
            deny_unknown_fields = bool(self.config["QUERYSTRING_DENY_UNKNOWN_FIELDS"])
        try:
            return decode(
                query_string,
                self.target,
                self.resolve_mode(),
                deny_unknown_fields=deny_unknown_fields,
            )
        except DecodeError as e:
            self.logger.info(
                "rejected query string for %s: %s",
                getattr(self.target, "__name__", self.target),
                e,
            )
            raise QueryStringRejection(e) from e

    def from_environ(self, environ):
        # PEP 3333 strings carry the raw bytes as latin-1.
        return self.decode(environ.get("QUERY_STRING", "").encode("latin-1"))

    def from_request(self, request):
        """Decode the query string of a werkzeug or Flask request."""
        query_string = getattr(request, "query_string", None)
        if query_string is None:
            return self.from_environ(request.environ)
        if isinstance(query_string, str):
            query_string = query_string.encode("latin-1")
        return self.decode(query_string)

    def __call__(self, view):
        @functools.wraps(view)
        def wrapper(request, *args, **kwargs):
            kwargs["query"] = self.from_request(request)
            return view(request, *args, **kwargs)

        return wrapper
