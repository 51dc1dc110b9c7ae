from docshelf.databases.mongodb import MongoDB

__all__ = ["MongoDB"]
