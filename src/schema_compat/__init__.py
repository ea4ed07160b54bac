"""
schema_compat – Schema-compatibility verification engine.

Import path convention::

    from schema_compat.kernel.contracts import CompatibilityMode, Schema, SchemaType
    from schema_compat.application.compatibility import CompatibilityVerifier, verify
    from schema_compat.kernel.errors import IncompatibleSchemaChangeError
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
