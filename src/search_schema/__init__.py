"""
Solr schema modeling and validation.

This package provides:
- schema: Typed properties, field types, static/dynamic fields and copy fields
- schema_cache: The expected schema, built from the metadata field catalog
- admin_client: Schema API client
- checker: Validation of the live schema against the expected one
- report: Structured validation findings
"""
