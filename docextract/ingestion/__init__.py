"""Document extraction: format decoders, language detection and metadata canonicalization."""
