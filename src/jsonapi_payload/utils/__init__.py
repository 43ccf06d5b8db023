from .types import UNSPECIFIED, UnspecifiedType  # noqa
from .assertions import assert_not_none, assert_type  # noqa
