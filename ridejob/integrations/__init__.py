"""External data sources: microCMS, the postcode table, ZipCloud and Apps Script."""
