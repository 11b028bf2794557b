"""HTTP client and response models for the document-analysis service."""
