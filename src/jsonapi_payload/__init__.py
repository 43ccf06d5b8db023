from .declarative import Attr  # noqa
from .exceptions import (  # noqa
    ConfigurationError,
    InvalidDeclarationError,
    InvalidScopeError,
    JSONAPIPayloadException,
    UndefinedResourceTypeError,
    UnknownResourceTypeError,
)
from .interfaces import DescriptorTable, Record, TempIdGenerator  # noqa
from .models import AttributeDescriptor, DescriptorRegistry, ResourceDescriptor  # noqa
from .payload import WritePayload  # noqa
from .reconciler import reconcile  # noqa
from .record import Model  # noqa
from .serde.interfaces import ResourceMethod  # noqa
from .serde.renderer import ReprRenderer  # noqa
