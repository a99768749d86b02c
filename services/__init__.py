"""Services package for toolscout."""
