"""site-bootstrap: safe archive import and verified config mutation for new projects."""

__version__ = "0.1.0"
