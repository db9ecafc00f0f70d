"""NetBox side: REST client for the CMDB capabilities."""
