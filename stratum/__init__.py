__title__ = 'stratum'
__license__ = 'MIT'
# Placeholder, modified by dynamic-versioning.
__version__ = "0.0.0"

from .values import *
from .tokens import *
from .options import *
from .documents import *
from .faults import *
from .validation import *
from .engine import *
from .config import *

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
    "__title__",
    "__license__",
    "__version__",
    "version_info"
)

# Load the exposed API of the value container
__all__ += values.__all__  # type: ignore[attr-defined]
# Load the exposed API of the token classifier
__all__ += tokens.__all__  # type: ignore[attr-defined]
# Load the exposed API of the option declarations
__all__ += options.__all__  # type: ignore[attr-defined]
# Load the exposed API of the document trees
__all__ += documents.__all__  # type: ignore[attr-defined]
# Load the exposed API of the faults
__all__ += faults.__all__  # type: ignore[attr-defined]
# Load the exposed API of the validators
__all__ += validation.__all__  # type: ignore[attr-defined]
# Load the exposed API of the resolution engine
__all__ += engine.__all__  # type: ignore[attr-defined]
# Load the exposed API of the host-facing config object
__all__ += config.__all__  # type: ignore[attr-defined]
