"""Server-side services: attribution, region lookup and webhook fan-out."""
