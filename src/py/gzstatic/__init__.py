from .http.model import HTTPRequest, HTTPResponse  # NOQA: F401
from .handler import StaticHandler, handle, static  # NOQA: F401
from .negotiation import HandlerFlags, Negotiator  # NOQA: F401
from .registry import (  # NOQA: F401
	REGISTRY,
	EncodingRegistry,
	RegistryError,
	UnknownExtension,
	register,
)
from .server import run  # NOQA: F401

# EOF
