"""Google Docs to CMS blog content: richtext conversion, metadata extraction and translation."""
