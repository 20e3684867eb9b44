"""GitLab group, pipeline and job browser"""

from .client import ResourceClient
from .config import Config
from .errors import ConfigError, NavigationReferenceError, RemoteError
from .navigator import Navigator

__version__ = "0.1.0"

__all__ = [
    'Config',
    'ConfigError',
    'Navigator',
    'NavigationReferenceError',
    'RemoteError',
    'ResourceClient',
]
