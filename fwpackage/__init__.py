"""Build, extract and describe gzip-compressed TAR firmware packages.

Also holds an option parser and little-endian packet buffers.
"""

__version__ = "0.1.0"