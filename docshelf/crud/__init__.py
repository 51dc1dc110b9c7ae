from docshelf.crud.base import SoftDeleteRepository

__all__ = ["SoftDeleteRepository"]
