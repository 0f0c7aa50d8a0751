"""Tools package for PageAudit."""
