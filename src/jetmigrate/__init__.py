"""jetmigrate: migrate Android projects from the Support Library to AndroidX.

The package rewrites class references in place and reports the imports and
build artifacts that need a manual update.

The bundled mapping tables cover the commonly used Support Library, data
binding and architecture component classes only. For a complete migration pass
``--mappings-dir`` a directory holding Google's full published class and
artifact mapping CSVs under the bundled file names.
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
