"""Pydantic schemas for request/response validation."""

from .analytics import *  # noqa: F403
from .availability import *  # noqa: F403
from .booking import *  # noqa: F403
from .common import *  # noqa: F403
from .health import *  # noqa: F403
from .page import *  # noqa: F403
from .payment import *  # noqa: F403
from .settings import *  # noqa: F403
from .taxonomy import *  # noqa: F403
from .tour import *  # noqa: F403
from .tracking import *  # noqa: F403
from .translation import *  # noqa: F403
from .ui_translation import *  # noqa: F403
from .upload import *  # noqa: F403
