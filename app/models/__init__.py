# app/models/__init__.py
from app.db.base import Base  # noqa: F401

from . import company         # noqa: F401
from . import user            # noqa: F401
from . import vehicle         # noqa: F401
from . import maintenance     # noqa: F401
from . import notification    # noqa: F401
from . import preferences     # noqa: F401
from . import fleet           # noqa: F401
