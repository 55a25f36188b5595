"""Read OLE2 compound documents and unwrap attachments embedded in their streams."""

__version__ = "0.2.1"