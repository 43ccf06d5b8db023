from .jsonpointer import JSONPointer  # noqa
from .formatting import camelize, dasherize, english_enumerate, underscore  # noqa
