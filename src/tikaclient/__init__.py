"""
tikaclient - client for the Apache Tika document-analysis server.

Talks to an existing server over HTTP, or downloads, launches and supervises a
local server process for the lifetime of the client.
"""

__version__ = "0.3.0"

# Re-export the main entry points for convenience
from tikaclient.core.config.models import ServiceConfig
from tikaclient.core.exceptions import ErrorKind, TikaError
from tikaclient.core.web.client import TikaClient
from tikaclient.core.web.translate import Translator

__all__ = ["ServiceConfig", "TikaClient", "TikaError", "ErrorKind", "Translator", "__version__"]
