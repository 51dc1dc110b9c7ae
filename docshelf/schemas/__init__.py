from docshelf.schemas.change_summary import ChangeSummary

__all__ = [
    "ChangeSummary",
]
