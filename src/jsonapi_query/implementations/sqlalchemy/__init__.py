from .core import SQLAResourceDescription, default_extract_fields  # noqa
from .declarative import SQLAResourceDescriptionRegistry  # noqa
