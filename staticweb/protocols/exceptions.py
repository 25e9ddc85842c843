class HTTPError(Exception):
    status = 500


class MalformedRequestLine(HTTPError):
    status = 400


class UnsupportedMethod(HTTPError):
    status = 501


class ResourceNotFound(HTTPError):
    status = 404


class IOFailure(Exception):
    "writing to the response sink failed"
