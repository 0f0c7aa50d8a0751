"""Exception types raised by PageAudit."""


class PageAuditError(Exception):
    """Base class for PageAudit errors."""


class UnknownMessageError(PageAuditError):
    """A message envelope did not match any known message kind."""


class UnknownSignalKindError(PageAuditError):
    """A serialized signal carried an unrecognized ``kind``."""


class PageLoadError(PageAuditError):
    """The page under audit could not be fetched."""

    def __init__(self, url: str, message: str):
        super().__init__(f"Failed to load {url}: {message}")
        self.url = url
