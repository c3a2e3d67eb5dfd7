"""Server-rendered Q&A pages.

Plain HTML forms and redirects; every read and write goes through the REST API.

Auth: the login reply is kept in the ``jwt`` cookie and its token is forwarded
on protected API calls.
"""
