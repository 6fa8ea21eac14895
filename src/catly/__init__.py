"""Catly - write-once image object storage.

Uploads arrive on one HTTP interface, pass the upload validation gateway and
are persisted exactly once under their caller-supplied name. A second HTTP
interface serves stored objects back by name.
"""

__version__ = "0.1.0"
