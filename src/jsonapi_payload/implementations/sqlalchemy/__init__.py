from .core import SQLAContext, SQLARecord, build_descriptor  # noqa
