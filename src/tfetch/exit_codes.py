"""Numeric process exit codes used by the ``tfetch`` command line.

Each constant maps to an error category and is referenced by the
corresponding :class:`~tfetch.exceptions.TFetchError` subclass.  Shell
scripts can inspect the exit code to tell a refused connection apart from
an HTTP 404 without parsing stderr.

Example::

    $ tfetch get https://api.example.com/missing
    $ echo $?
    5   # EXIT_HTTP_ERROR -- the server answered with a non-2xx status
"""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""Invalid configuration, arguments, or unsupported request content."""

EXIT_HTTP_ERROR = 5
"""The server answered with a non-2xx HTTP status."""

EXIT_TRANSPORT_ERROR = 6
"""A network-level or decode error persisted after all retries."""
