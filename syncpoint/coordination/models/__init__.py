from .request import (
    Request as Request,
    RequestKind as RequestKind,
)
from .response import (
    Response as Response,
    ResponseKind as ResponseKind,
)
