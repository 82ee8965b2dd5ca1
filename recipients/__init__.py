"""Recipients of a document and the files they attach while signing."""
