__path__ = __import__("pkgutil").extend_path(__path__, __name__)  # NOQA: F-821
__title__ = 'hinge'
__author__ = 'Eiko Reishin (影皇嶺臣)'
__license__ = 'MIT'
# Placeholder, modified by dynamic-versioning.
__version__ = "0.0.0"

from .outputs import *
from .tokens import *
from .consumers import *
from .help import *
from .api import *
from .faults import *

VersionInfo = __import__("collections").namedtuple("VersionInfo", (
    "major",
    "minor",
    "micro",
    "releaselevel",
    "serial",
    "metadata"
))

# Placeholder, modified by dynamic-versioning.
version_info = VersionInfo(0, 0, 0, "final", 0, "")

__all__ = (
    "__path__",
    "__title__",
    "__author__",
    "__license__",
    "__version__",
    "version_info"
)

# Load the exposed API of the outputs
__all__ += outputs.__all__  # type: ignore[attr-defined]
# Load the exposed API of the token stream
__all__ += tokens.__all__  # type: ignore[attr-defined]
# Load the exposed API of the consumers
__all__ += consumers.__all__  # type: ignore[attr-defined]
# Load the exposed API of the help tree
__all__ += help.__all__  # type: ignore[attr-defined]
# Load the exposed API of the façade
__all__ += api.__all__  # type: ignore[attr-defined]
# Load the exposed API of the faults
__all__ += faults.__all__  # type: ignore[attr-defined]
