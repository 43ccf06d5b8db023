import enum


class ResourceMethod(enum.Enum):
    """
    The write method a resource identifier asks the server to apply to the
    record it points at.
    """

    CREATE = "create"
    UPDATE = "update"
    DESTROY = "destroy"
    DISASSOCIATE = "disassociate"
