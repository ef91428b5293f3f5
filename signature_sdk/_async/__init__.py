from ._client import *  # noqa: F403
from ._http import *  # noqa: F403
from ._mock import *  # noqa: F403
from ._pipeline import *  # noqa: F403
from ._refresh import *  # noqa: F403
from ._services import *  # noqa: F403
