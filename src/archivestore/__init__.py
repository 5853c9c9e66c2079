"""
archivestore: Pluggable storage backends for archived course data.

Stores, retrieves and deletes opaque archive blobs through a uniform driver
contract, so an archiving pipeline can target local disks, object stores or
cold storage without knowing which one it is talking to.
"""

__version__ = "0.1.0"
