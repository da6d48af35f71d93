"""Helpers for driving a Mattermost server's user API from end-to-end tests.

The ``api_*`` functions in :mod:`mm_e2e_cli.core.users` can be imported by test
suites directly; the ``mm-e2e`` command exposes the same operations from a
shell.
"""

__version__ = "0.1.0"
